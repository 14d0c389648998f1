"""
One sync cycle: scrape -> merge -> persist -> notify -> publish.

Every collaborator is injected so the cycle can run offline, against fakes in tests,
or in dry-run mode from the CLI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from dramabox_backend.config import SyncSettings
from dramabox_backend.db.local_cache import CacheMissError, LocalCacheStore
from dramabox_backend.ingestion.catalog_merge import CatalogMerger, MergeResult, build_baseline, sort_catalog
from dramabox_backend.ingestion.notifications import Notification, NotificationDispatcher
from dramabox_backend.ingestion.show_details import (
    DetailFetchSummary,
    RetriesExhaustedError,
    call_with_retries,
    fetch_show_details,
)
from dramabox_backend.integrations.tvb.fetcher import PageFetcher
from dramabox_backend.integrations.tvb.parser import (
    ParseError,
    flatten_catalog,
    parse_catalog_page,
    parse_show_detail_page,
)
from dramabox_backend.models.catalog import CatalogState
from dramabox_backend.models.shows import CatalogEntry, ShowRecord
from dramabox_backend.repositories.catalog import RemoteCatalog
from dramabox_backend.repositories.shows import RemoteError
from dramabox_backend.utils.normalization import normalize_title

logger = logging.getLogger(__name__)


@dataclass
class SyncCycleResult:
    online: bool
    dry_run: bool
    entries_found: int = 0
    details: DetailFetchSummary = field(default_factory=DetailFetchSummary)
    merge: MergeResult = field(default_factory=MergeResult)
    notifications: list[Notification] = field(default_factory=list)
    cache_saved: bool = False

    @property
    def catalog(self) -> list[ShowRecord]:
        return self.merge.catalog


class CatalogSyncService:
    def __init__(
        self,
        *,
        fetcher: PageFetcher,
        cache: LocalCacheStore,
        remote: RemoteCatalog | None = None,
        notifier: NotificationDispatcher | None = None,
        state: CatalogState | None = None,
        settings: SyncSettings | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self._remote = remote
        self._notifier = notifier
        self._state = state
        self._settings = settings or SyncSettings()

    def _fetch_with_retries(self, url: str) -> str:
        return call_with_retries(
            lambda: self._fetcher.fetch(url),
            max_retries=self._settings.max_retries,
            retry_delay_seconds=self._settings.retry_delay_seconds,
        )

    def scrape_catalog_entries(self) -> list[CatalogEntry]:
        """Flat entry list across all categories; empty when the catalog page is unreachable."""

        url = self._settings.catalog_url
        try:
            html = self._fetch_with_retries(url)
        except RetriesExhaustedError as exc:
            logger.error("Catalog page %s unavailable after %d attempts: %s", url, exc.attempts, exc)
            return []

        try:
            grouped = parse_catalog_page(html, base_url=self._settings.base_url, fetch_html=self._fetch_with_retries)
        except ParseError as exc:
            logger.error("Catalog page %s could not be parsed: %s", url, exc)
            return []
        entries = flatten_catalog(grouped)
        logger.info("Catalog page lists %d shows across %d categories", len(entries), len(grouped))
        return entries

    def fetch_detail(self, entry: CatalogEntry) -> ShowRecord:
        html = self._fetcher.fetch(entry.detail_url)
        record = parse_show_detail_page(html, base_url=self._settings.base_url)
        if record.thumb_image_url is None:
            record = replace(record, thumb_image_url=entry.thumbnail_url)
        return record

    def _fetch_remote_records(self, remote: RemoteCatalog | None) -> list[ShowRecord] | None:
        if remote is None:
            return None
        try:
            return remote.fetch_all()
        except RemoteError as exc:
            logger.warning("Remote catalog unavailable, merging without it: %s", exc)
            return None

    def run_cycle(
        self,
        *,
        online: bool = True,
        dry_run: bool = False,
        limit: int | None = None,
        only_new: bool = False,
    ) -> SyncCycleResult:
        remote = self._remote if online else None
        result = SyncCycleResult(online=remote is not None, dry_run=dry_run)

        cached = self._cache.load_or_empty()
        remote_records = self._fetch_remote_records(remote)

        entries = self.scrape_catalog_entries()
        result.entries_found = len(entries)
        if only_new:
            known_titles = {normalize_title(r.title) for r in build_baseline(cached, remote_records).values()}
            entries = [e for e in entries if normalize_title(e.title) not in known_titles]
        if limit is not None:
            entries = entries[: max(0, int(limit))]

        result.details = fetch_show_details(
            entries,
            self.fetch_detail,
            batch_size=self._settings.batch_size,
            max_retries=self._settings.max_retries,
            retry_delay_seconds=self._settings.retry_delay_seconds,
        )

        merger = CatalogMerger(None if dry_run else remote)
        result.merge = merger.reconcile(cached=cached, remote_records=remote_records, scraped=result.details.records)

        if dry_run:
            logger.info("Dry run: skipping cache write and notifications")
        else:
            try:
                self._cache.save(result.merge.catalog)
                result.cache_saved = True
            except OSError as exc:
                logger.error("Failed to write catalog cache %s: %s", self._cache.path, exc)
            if self._notifier is not None:
                result.notifications = self._notifier.dispatch(result.merge.new_shows, result.merge.new_episodes)

        if self._state is not None:
            self._state.publish(result.merge.catalog)
        return result

    def load_catalog(self, *, online: bool) -> list[ShowRecord]:
        """
        Catalog for display without scraping: the remote catalog merged with the cache
        when online (written back to the cache), otherwise the cache alone.
        """

        remote_records = self._fetch_remote_records(self._remote if online else None)
        if remote_records is None:
            try:
                shows = sort_catalog(build_baseline(self._cache.load(), None).values())
            except CacheMissError as exc:
                logger.warning("No catalog available offline: %s", exc)
                shows = []
        else:
            cached = self._cache.load_or_empty()
            shows = sort_catalog(build_baseline(cached, remote_records).values())
            try:
                self._cache.save(shows)
            except OSError as exc:
                logger.error("Failed to write catalog cache %s: %s", self._cache.path, exc)

        if self._state is not None:
            self._state.publish(shows)
        return shows
