"""
Persistence helpers: the Supabase client factory and the on-disk catalog cache.
"""

from dramabox_backend.db.local_cache import CacheMissError, LocalCacheStore
from dramabox_backend.db.supabase import create_supabase_admin_client

__all__ = [
    "CacheMissError",
    "LocalCacheStore",
    "create_supabase_admin_client",
]
