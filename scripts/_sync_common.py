from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from supabase import Client

from dramabox_backend.config import SyncSettings, load_sync_settings
from dramabox_backend.db.local_cache import LocalCacheStore
from dramabox_backend.db.supabase import create_supabase_admin_client, get_supabase_url, supabase_configured
from dramabox_backend.ingestion.catalog_sync import CatalogSyncService
from dramabox_backend.ingestion.notifications import (
    LoggingNotificationSink,
    NotificationDispatcher,
    NotificationSink,
    WebhookNotificationSink,
)
from dramabox_backend.integrations.tvb.fetcher import PageFetcher, check_online
from dramabox_backend.models.catalog import CatalogState
from dramabox_backend.repositories.catalog import SupabaseCatalogClient
from dramabox_backend.repositories.shows import assert_show_details_table_exists
from dramabox_backend.utils.env import load_env

logger = logging.getLogger(__name__)


def add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--offline", action="store_true", help="Skip Supabase entirely; use the local cache only.")
    parser.add_argument("--cache-path", default=None, help="Catalog cache file (default: DRAMABOX_CACHE_PATH).")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_env_and_db() -> Client:
    load_env()
    db = create_supabase_admin_client()
    assert_show_details_table_exists(db)
    return db


def resolve_settings(args: argparse.Namespace) -> SyncSettings:
    settings = load_sync_settings()
    overrides: dict[str, object] = {}
    if getattr(args, "cache_path", None):
        overrides["cache_path"] = Path(args.cache_path)
    if getattr(args, "batch_size", None) is not None:
        overrides["batch_size"] = max(1, int(args.batch_size))
    if getattr(args, "max_retries", None) is not None:
        overrides["max_retries"] = max(0, int(args.max_retries))
    if not overrides:
        return settings
    return replace(settings, **overrides)


def resolve_online(args: argparse.Namespace) -> bool:
    if args.offline:
        return False
    if not supabase_configured():
        logger.warning("SUPABASE_URL/SUPABASE_SERVICE_ROLE_KEY not set; running offline.")
        return False
    return check_online(get_supabase_url())


def build_notification_sink(settings: SyncSettings) -> NotificationSink:
    if settings.notification_webhook_url:
        return WebhookNotificationSink(settings.notification_webhook_url)
    return LoggingNotificationSink()


def build_sync_service(
    settings: SyncSettings,
    *,
    online: bool,
    state: CatalogState | None = None,
) -> CatalogSyncService:
    remote = SupabaseCatalogClient(load_env_and_db()) if online else None
    return CatalogSyncService(
        fetcher=PageFetcher(timeout_seconds=settings.request_timeout_seconds),
        cache=LocalCacheStore(settings.cache_path),
        remote=remote,
        notifier=NotificationDispatcher(build_notification_sink(settings)),
        state=state,
        settings=settings,
    )
