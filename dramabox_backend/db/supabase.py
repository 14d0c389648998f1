"""
Supabase access for the catalog sync job.

The sync job appends to `show_details` and `episodes`, which only the service role
key may write; the read-only API never talks to Supabase and serves the local
cache instead.
"""

from __future__ import annotations

from functools import lru_cache

from supabase import Client, create_client

from dramabox_backend.utils.env import env_str

SUPABASE_URL_ENV = "SUPABASE_URL"
SUPABASE_SERVICE_ROLE_KEY_ENV = "SUPABASE_SERVICE_ROLE_KEY"


def _required(name: str) -> str:
    value = env_str(name)
    if value is None:
        raise RuntimeError(f"{name} is not set; pass --offline to sync against the local cache only")
    return value


@lru_cache
def get_supabase_url() -> str:
    return _required(SUPABASE_URL_ENV)


@lru_cache
def get_supabase_service_key() -> str:
    return _required(SUPABASE_SERVICE_ROLE_KEY_ENV)


def supabase_configured() -> bool:
    """True when both connection settings are present (no request is made)."""

    return env_str(SUPABASE_URL_ENV) is not None and env_str(SUPABASE_SERVICE_ROLE_KEY_ENV) is not None


def create_supabase_admin_client(*, url: str | None = None, service_role_key: str | None = None) -> Client:
    """Service-role client for catalog writes; explicit arguments win over the environment."""

    return create_client(url or get_supabase_url(), service_role_key or get_supabase_service_key())
