from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from supabase import Client

from dramabox_backend.models.shows import Episode, ShowRecord
from dramabox_backend.repositories.episodes import fetch_episode_titles_for_show, insert_episodes
from dramabox_backend.repositories.shows import (
    ShowRepositoryError,
    fetch_all_shows,
    find_show_id,
    insert_show,
)

logger = logging.getLogger(__name__)


class RemoteCatalog(Protocol):
    """
    Port used by the merge engine to read and append to the remote catalog.

    Every method raises `RemoteError` on failure.
    """

    def exists(self, title: str, year: str) -> bool: ...

    def find_show_id(self, title: str, year: str) -> int | None: ...

    def insert_show(self, record: ShowRecord) -> int: ...

    def fetch_episode_titles(self, title: str, year: str) -> set[str]: ...

    def fetch_episode_titles_for_id(self, remote_id: int) -> set[str]: ...

    def insert_episodes(self, remote_id: int, episodes: Sequence[Episode]) -> int: ...

    def fetch_all(self) -> list[ShowRecord]: ...


def _dedupe_episodes(episodes: Sequence[Episode]) -> list[Episode]:
    seen: set[str] = set()
    out: list[Episode] = []
    for episode in episodes:
        if episode.title in seen:
            continue
        seen.add(episode.title)
        out.append(episode)
    return out


class SupabaseCatalogClient(RemoteCatalog):
    """`RemoteCatalog` over the `show_details` and `episodes` tables."""

    def __init__(self, db: Client) -> None:
        self._db = db

    def exists(self, title: str, year: str) -> bool:
        return self.find_show_id(title, year) is not None

    def find_show_id(self, title: str, year: str) -> int | None:
        return find_show_id(self._db, title, year)

    def insert_show(self, record: ShowRecord) -> int:
        row = insert_show(self._db, record)
        remote_id = row.get("id")
        if not isinstance(remote_id, int):
            raise ShowRepositoryError(f"Supabase insert returned no id for show {record.title!r}.")
        episodes = _dedupe_episodes(record.episodes)
        if episodes:
            insert_episodes(self._db, show_id=remote_id, episodes=episodes)
        logger.info("Inserted show %r (%s) id=%s with %d episodes", record.title, record.year, remote_id, len(episodes))
        return remote_id

    def fetch_episode_titles(self, title: str, year: str) -> set[str]:
        show_id = self.find_show_id(title, year)
        if show_id is None:
            return set()
        return self.fetch_episode_titles_for_id(show_id)

    def fetch_episode_titles_for_id(self, remote_id: int) -> set[str]:
        return fetch_episode_titles_for_show(self._db, show_id=remote_id)

    def insert_episodes(self, remote_id: int, episodes: Sequence[Episode]) -> int:
        if not episodes:
            return 0
        return insert_episodes(self._db, show_id=remote_id, episodes=episodes)

    def fetch_all(self) -> list[ShowRecord]:
        rows = fetch_all_shows(self._db)
        return [ShowRecord.from_dict(row) for row in rows if isinstance(row, dict)]
