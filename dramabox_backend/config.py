"""
Runtime settings for catalog sync jobs.

Values come from environment variables (optionally loaded from `.env` via
`dramabox_backend.utils.env.load_env`). CLI flags override them per run.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dramabox_backend.utils.env import env_float, env_int, env_str

DEFAULT_BASE_URL = "https://tvbanywherena.com"
DEFAULT_CATALOG_PATH = "/english"
DEFAULT_CACHE_PATH = Path("data") / "ShowDetails.json"
DEFAULT_BATCH_SIZE = 30
DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_DELAY_MS = 100
DEFAULT_REQUEST_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True)
class SyncSettings:
    base_url: str = DEFAULT_BASE_URL
    catalog_path: str = DEFAULT_CATALOG_PATH
    cache_path: Path = DEFAULT_CACHE_PATH
    batch_size: int = DEFAULT_BATCH_SIZE
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_MS / 1000
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    notification_webhook_url: str | None = None

    @property
    def catalog_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.catalog_path.lstrip('/')}"


def load_sync_settings(environ: Mapping[str, str] | None = None) -> SyncSettings:
    batch_size = env_int("DRAMABOX_BATCH_SIZE", DEFAULT_BATCH_SIZE, environ=environ)
    if batch_size < 1:
        raise ValueError(f"DRAMABOX_BATCH_SIZE must be >= 1, got {batch_size}")
    max_retries = env_int("DRAMABOX_MAX_RETRIES", DEFAULT_MAX_RETRIES, environ=environ)
    if max_retries < 0:
        raise ValueError(f"DRAMABOX_MAX_RETRIES must be >= 0, got {max_retries}")

    return SyncSettings(
        base_url=env_str("DRAMABOX_BASE_URL", DEFAULT_BASE_URL, environ=environ) or DEFAULT_BASE_URL,
        catalog_path=env_str("DRAMABOX_CATALOG_PATH", DEFAULT_CATALOG_PATH, environ=environ) or DEFAULT_CATALOG_PATH,
        cache_path=Path(env_str("DRAMABOX_CACHE_PATH", str(DEFAULT_CACHE_PATH), environ=environ) or DEFAULT_CACHE_PATH),
        batch_size=batch_size,
        max_retries=max_retries,
        retry_delay_seconds=max(0, env_int("DRAMABOX_RETRY_DELAY_MS", DEFAULT_RETRY_DELAY_MS, environ=environ)) / 1000,
        request_timeout_seconds=env_float(
            "DRAMABOX_REQUEST_TIMEOUT",
            DEFAULT_REQUEST_TIMEOUT_SECONDS,
            environ=environ,
        ),
        notification_webhook_url=env_str("DRAMABOX_NOTIFY_WEBHOOK_URL", environ=environ),
    )
