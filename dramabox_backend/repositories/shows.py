from __future__ import annotations

from typing import Any

from supabase import Client

from dramabox_backend.models.shows import ShowRecord
from dramabox_backend.utils.normalization import show_key

SHOWS_TABLE = "show_details"
SHOW_WITH_EPISODES_SELECT = "*, episodes(*)"


class RemoteError(RuntimeError):
    """A remote catalog query or insert failed; the affected show is skipped this cycle."""


class ShowRepositoryError(RemoteError):
    pass


def assert_show_details_table_exists(db: Client) -> None:
    """
    Fail fast with a clear error if `show_details` is missing in Supabase.

    This avoids confusing per-show failures halfway through a sync cycle.
    """

    def is_missing_relation(message: str) -> bool:
        msg = (message or "").casefold()
        return (
            "42p01" in msg  # undefined_table
            or "pgrst205" in msg  # postgrest: relation not found in schema cache
            or ("relation" in msg and "does not exist" in msg)
            or ("schema cache" in msg and SHOWS_TABLE in msg)
            or ("could not find" in msg and "relation" in msg)
        )

    def help_message() -> str:
        return (
            f"Database table `{SHOWS_TABLE}` is missing. "
            "Run `supabase db push` to apply migrations "
            "(see `supabase/migrations/0001_show_details_and_episodes.sql`), "
            "then re-run the sync job."
        )

    try:
        response = db.table(SHOWS_TABLE).select("id").limit(1).execute()
    except Exception as exc:
        if is_missing_relation(str(exc)):
            raise ShowRepositoryError(help_message()) from exc
        raise ShowRepositoryError(f"Supabase error during {SHOWS_TABLE} preflight: {exc}") from exc

    error = getattr(response, "error", None)
    if not error:
        return

    parts = [
        str(getattr(error, "code", "") or ""),
        str(getattr(error, "message", "") or ""),
        str(getattr(error, "details", "") or ""),
        str(getattr(error, "hint", "") or ""),
        str(error),
    ]
    combined = " ".join([p for p in parts if p]).strip()
    if is_missing_relation(combined):
        raise ShowRepositoryError(help_message())
    raise ShowRepositoryError(f"Supabase error during {SHOWS_TABLE} preflight: {combined}")


def _raise_for_supabase_error(response: Any, context: str) -> None:
    if hasattr(response, "error") and response.error:
        raise ShowRepositoryError(f"Supabase error during {context}: {response.error}")


def _execute(query: Any, context: str) -> list[dict[str, Any]]:
    try:
        response = query.execute()
    except Exception as exc:
        raise ShowRepositoryError(f"Supabase error during {context}: {exc}") from exc
    _raise_for_supabase_error(response, context)
    data = response.data or []
    return data if isinstance(data, list) else []


def find_show_id(db: Client, title: str, year: str) -> int | None:
    """
    Look up a show's id by composite identity.

    Titles are compared after normalization client-side, so the query only narrows
    by year; `ilike` would treat `%`/`_` in titles as wildcards. Rows are ordered by id so
    same-identity duplicates always resolve to the oldest row.
    """

    wanted = show_key(title, year)
    rows = _execute(
        db.table(SHOWS_TABLE).select("id,title,year").eq("year", wanted[1]).order("id"),
        f"finding show {title!r} ({year})",
    )
    for row in rows:
        if show_key(row.get("title"), row.get("year")) != wanted:
            continue
        show_id = row.get("id")
        if isinstance(show_id, int):
            return show_id
        if isinstance(show_id, str) and show_id.isdigit():
            return int(show_id)
    return None


def insert_show(db: Client, show: ShowRecord) -> dict[str, Any]:
    rows = _execute(db.table(SHOWS_TABLE).insert(show.to_row()), f"inserting show {show.title!r}")
    if rows:
        return rows[0]
    raise ShowRepositoryError(f"Supabase insert returned no data for show {show.title!r}.")


def fetch_all_shows(db: Client) -> list[dict[str, Any]]:
    return _execute(db.table(SHOWS_TABLE).select(SHOW_WITH_EPISODES_SELECT), "listing shows")
