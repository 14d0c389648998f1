from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from supabase import Client

from dramabox_backend.models.shows import Episode
from dramabox_backend.repositories.shows import RemoteError

EPISODES_TABLE = "episodes"
EPISODE_INSERT_BATCH_SIZE = 50


class EpisodeRepositoryError(RemoteError):
    pass


def _execute(query: Any, context: str) -> list[dict[str, Any]]:
    try:
        response = query.execute()
    except Exception as exc:
        raise EpisodeRepositoryError(f"Supabase error {context}: {exc}") from exc
    if hasattr(response, "error") and response.error:
        raise EpisodeRepositoryError(f"Supabase error {context}: {response.error}")
    data = response.data or []
    return data if isinstance(data, list) else []


def fetch_episode_titles_for_show(db: Client, *, show_id: int) -> set[str]:
    rows = _execute(
        db.table(EPISODES_TABLE).select("title").eq("show_id", int(show_id)),
        f"listing episodes for show_id={show_id}",
    )
    return {str(row["title"]) for row in rows if row.get("title")}


def insert_episodes(
    db: Client,
    *,
    show_id: int,
    episodes: Iterable[Episode],
    batch_size: int = EPISODE_INSERT_BATCH_SIZE,
) -> int:
    """
    Append episodes to a show in batches of `batch_size` rows.

    Returns the number of rows inserted. A failing batch raises; earlier batches stay
    inserted and are skipped by the title delta on the next cycle.
    """

    rows = [
        {
            "show_id": int(show_id),
            "title": episode.title,
            "url": episode.url,
            "thumbnail_url": episode.thumbnail_url,
        }
        for episode in episodes
    ]
    inserted = 0
    for start in range(0, len(rows), batch_size):
        batch = rows[start : start + batch_size]
        _execute(db.table(EPISODES_TABLE).insert(batch), f"inserting episodes for show_id={show_id}")
        inserted += len(batch)
    return inserted
