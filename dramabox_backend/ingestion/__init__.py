"""
Ingestion pipeline: detail fetching, catalog reconciliation, notifications and the
sync cycle that ties them together.
"""

from dramabox_backend.ingestion.catalog_merge import (
    CatalogMerger,
    MergeResult,
    NewEpisode,
    merge_episodes,
    merge_show_records,
)
from dramabox_backend.ingestion.catalog_sync import CatalogSyncService, SyncCycleResult
from dramabox_backend.ingestion.notifications import (
    LoggingNotificationSink,
    Notification,
    NotificationDispatcher,
    WebhookNotificationSink,
)
from dramabox_backend.ingestion.show_details import DetailFetchSummary, call_with_retries, fetch_show_details

__all__ = [
    "CatalogMerger",
    "CatalogSyncService",
    "DetailFetchSummary",
    "LoggingNotificationSink",
    "MergeResult",
    "NewEpisode",
    "Notification",
    "NotificationDispatcher",
    "SyncCycleResult",
    "WebhookNotificationSink",
    "call_with_retries",
    "fetch_show_details",
    "merge_episodes",
    "merge_show_records",
]
