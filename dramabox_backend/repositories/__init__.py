"""
Repository layer for DB access patterns.
"""

from dramabox_backend.repositories.catalog import RemoteCatalog, SupabaseCatalogClient
from dramabox_backend.repositories.episodes import EpisodeRepositoryError
from dramabox_backend.repositories.shows import (
    RemoteError,
    ShowRepositoryError,
    assert_show_details_table_exists,
)

__all__ = [
    "EpisodeRepositoryError",
    "RemoteCatalog",
    "RemoteError",
    "ShowRepositoryError",
    "SupabaseCatalogClient",
    "assert_show_details_table_exists",
]
