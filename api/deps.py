"""
Dependency injection for the catalog snapshot served by the API.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from dramabox_backend.config import load_sync_settings
from dramabox_backend.db.local_cache import CacheMissError, LocalCacheStore
from dramabox_backend.models.shows import ShowRecord
from dramabox_backend.utils.env import load_env

logger = logging.getLogger(__name__)


@lru_cache
def get_cache_store() -> LocalCacheStore:
    """
    Returns the cache store written by the sync job (DRAMABOX_CACHE_PATH).
    """
    load_env()
    return LocalCacheStore(load_sync_settings().cache_path)


def get_catalog(store: Annotated[LocalCacheStore, Depends(get_cache_store)]) -> list[ShowRecord]:
    """
    Current catalog snapshot; empty until the first sync cycle has persisted one.
    """
    try:
        return store.load()
    except CacheMissError as e:
        logger.warning("Serving empty catalog: %s", e)
        return []


# Type aliases for dependency injection
Catalog = Annotated[list[ShowRecord], Depends(get_catalog)]
