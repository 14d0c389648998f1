"""
Domain models shared across scripts and services.
"""

from dramabox_backend.models.catalog import CatalogState, group_by_genre, search_shows, shows_for_genre
from dramabox_backend.models.shows import CatalogEntry, Episode, ShowRecord

__all__ = [
    "CatalogEntry",
    "CatalogState",
    "Episode",
    "ShowRecord",
    "group_by_genre",
    "search_shows",
    "shows_for_genre",
]
