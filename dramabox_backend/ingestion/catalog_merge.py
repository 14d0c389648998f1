"""
Catalog reconciliation across the local cache, the remote store and a fresh scrape.

Identity is the normalized (title, year) key from `utils.normalization`. Records
with the same key are one logical show: metadata comes from the more authoritative
source, episode lists are always unioned by title (first occurrence wins).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from dramabox_backend.models.shows import Episode, ShowRecord
from dramabox_backend.repositories.catalog import RemoteCatalog
from dramabox_backend.repositories.shows import RemoteError
from dramabox_backend.utils.normalization import ShowKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewEpisode:
    show_title: str
    episode: Episode
    show_year: str = ""


@dataclass
class MergeResult:
    catalog: list[ShowRecord] = field(default_factory=list)
    new_shows: list[ShowRecord] = field(default_factory=list)
    new_episodes: list[NewEpisode] = field(default_factory=list)
    shows_inserted: int = 0
    episodes_inserted: int = 0
    remote_failures: list[str] = field(default_factory=list)


def merge_episodes(*episode_lists: Iterable[Episode]) -> list[Episode]:
    seen: set[str] = set()
    merged: list[Episode] = []
    for episodes in episode_lists:
        for episode in episodes:
            if episode.title in seen:
                continue
            seen.add(episode.title)
            merged.append(episode)
    return merged


def merge_show_records(base: ShowRecord, overlay: ShowRecord) -> ShowRecord:
    """`overlay` metadata replaces `base`; episodes are unioned with `base` first."""

    return replace(
        overlay,
        episodes=merge_episodes(base.episodes, overlay.episodes),
        remote_id=overlay.remote_id if overlay.remote_id is not None else base.remote_id,
    )


def collapse_by_identity(records: Iterable[ShowRecord]) -> dict[ShowKey, ShowRecord]:
    """Collapse same-identity records from one source; the first record keeps its metadata."""

    collapsed: dict[ShowKey, ShowRecord] = {}
    for record in records:
        existing = collapsed.get(record.key)
        if existing is None:
            collapsed[record.key] = replace(record, episodes=merge_episodes(record.episodes))
            continue
        collapsed[record.key] = replace(
            existing,
            episodes=merge_episodes(existing.episodes, record.episodes),
            remote_id=existing.remote_id if existing.remote_id is not None else record.remote_id,
        )
    return collapsed


def sort_catalog(records: Iterable[ShowRecord]) -> list[ShowRecord]:
    return sorted(records, key=lambda r: (r.title.casefold(), r.year))


def build_baseline(
    cached: Iterable[ShowRecord] | None,
    remote_records: Iterable[ShowRecord] | None,
) -> dict[ShowKey, ShowRecord]:
    """
    Baseline catalog keyed by identity: the cache snapshot, overlaid by the remote
    catalog when online (remote metadata wins, episodes are unioned).
    """

    baseline = collapse_by_identity(cached or [])
    if remote_records is None:
        return baseline
    for record in collapse_by_identity(remote_records).values():
        existing = baseline.get(record.key)
        baseline[record.key] = record if existing is None else merge_show_records(existing, record)
    return baseline


class CatalogMerger:
    """
    Reconciles one sync cycle. Pass `remote=None` when offline: the merge still runs
    against the cache, nothing is uploaded.
    """

    def __init__(self, remote: RemoteCatalog | None = None) -> None:
        self._remote = remote

    def reconcile(
        self,
        *,
        cached: Iterable[ShowRecord] | None,
        remote_records: Iterable[ShowRecord] | None,
        scraped: Iterable[ShowRecord],
    ) -> MergeResult:
        baseline = build_baseline(cached, remote_records)
        merged = dict(baseline)
        result = MergeResult()

        for record in collapse_by_identity(scraped).values():
            known = baseline.get(record.key)
            if known is None:
                added = self._add_new_show(record, result)
                merged[record.key] = added
                result.new_shows.append(added)
            else:
                merged[record.key] = self._update_known_show(known, record, result)

        result.catalog = sort_catalog(merged.values())
        logger.info(
            "Merged catalog: %d shows (%d new shows, %d new episodes, %d shows / %d episodes uploaded, %d remote failures)",
            len(result.catalog),
            len(result.new_shows),
            len(result.new_episodes),
            result.shows_inserted,
            result.episodes_inserted,
            len(result.remote_failures),
        )
        return result

    def _record_remote_failure(self, record: ShowRecord, exc: RemoteError, result: MergeResult) -> None:
        message = f"{record.title} ({record.year}): {exc}"
        logger.warning("Remote sync skipped for %s", message)
        result.remote_failures.append(message)

    def _upload_episode_delta(
        self,
        remote: RemoteCatalog,
        remote_id: int,
        record: ShowRecord,
        result: MergeResult,
    ) -> None:
        # Titles come from the row being written, never from a second identity lookup.
        remote_titles = remote.fetch_episode_titles_for_id(remote_id)
        delta = [episode for episode in merge_episodes(record.episodes) if episode.title not in remote_titles]
        if delta:
            result.episodes_inserted += remote.insert_episodes(remote_id, delta)
            logger.info("Uploaded %d new episodes for %r", len(delta), record.title)

    def _insert_or_update_remote(
        self,
        remote: RemoteCatalog,
        record: ShowRecord,
        upload: ShowRecord,
        result: MergeResult,
    ) -> ShowRecord:
        """
        Make the remote store contain `record`: insert it (with `upload`'s episodes)
        when the existence check misses, otherwise upload only the episode delta.
        """

        remote_id = record.remote_id
        if remote_id is None:
            remote_id = remote.find_show_id(record.title, record.year)
        if remote_id is None:
            remote_id = remote.insert_show(upload)
            result.shows_inserted += 1
            result.episodes_inserted += len(merge_episodes(upload.episodes))
        else:
            self._upload_episode_delta(remote, remote_id, upload, result)
        return replace(record, remote_id=remote_id)

    def _add_new_show(self, record: ShowRecord, result: MergeResult) -> ShowRecord:
        if self._remote is None:
            return record
        try:
            return self._insert_or_update_remote(self._remote, record, record, result)
        except RemoteError as exc:
            self._record_remote_failure(record, exc, result)
            return record

    def _update_known_show(self, known: ShowRecord, scraped: ShowRecord, result: MergeResult) -> ShowRecord:
        known_titles = known.episode_titles
        for episode in merge_episodes(scraped.episodes):
            if episode.title not in known_titles:
                result.new_episodes.append(NewEpisode(show_title=known.title, show_year=known.year, episode=episode))

        updated = replace(known, episodes=merge_episodes(known.episodes, scraped.episodes))
        if self._remote is None:
            return updated

        # A known show missing remotely (offline discovery, earlier failed insert) is
        # inserted with everything known about it; otherwise only scraped episodes the
        # remote lacks are uploaded.
        upload = updated if known.remote_id is None else replace(updated, episodes=scraped.episodes)
        try:
            return self._insert_or_update_remote(self._remote, updated, upload, result)
        except RemoteError as exc:
            self._record_remote_failure(known, exc, result)
            return updated
