"""
Browse endpoints for shows and their episodes.
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from api.deps import Catalog
from dramabox_backend.models.catalog import search_shows, shows_for_genre
from dramabox_backend.models.shows import ShowRecord

router = APIRouter(prefix="/shows", tags=["shows"])


# --- Pydantic models ---

class Episode(BaseModel):
    title: str
    url: str
    thumbnail_url: str | None = None


class ShowSummary(BaseModel):
    key: str
    title: str
    subtitle: str | None
    year: str
    genres: list[str]
    thumb_image_url: str | None
    episode_count: int


class Show(ShowSummary):
    schedule: str
    cast: list[str]
    description: str
    banner_image_url: str | None
    episodes: list[Episode]


def to_summary(show: ShowRecord) -> ShowSummary:
    return ShowSummary(
        key=show.key_string,
        title=show.title,
        subtitle=show.subtitle,
        year=show.year,
        genres=list(show.genres),
        thumb_image_url=show.thumb_image_url,
        episode_count=len(show.episodes),
    )


# --- Endpoints ---

@router.get("", response_model=list[ShowSummary])
def list_shows(
    catalog: Catalog,
    genre: str | None = Query(default=None),
    q: str | None = Query(default=None, description="Case-insensitive title search"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> list[ShowSummary]:
    """List shows sorted by title, optionally filtered by genre and search text."""
    shows = catalog
    if genre:
        shows = shows_for_genre(shows, genre)
    if q:
        shows = search_shows(shows, q)
    return [to_summary(show) for show in shows[offset : offset + limit]]


@router.get("/{show_key}", response_model=Show)
def get_show(catalog: Catalog, show_key: str) -> Show:
    """Get a show by its identity key (`<title>-<year>`, case-insensitive)."""
    wanted = show_key.strip().casefold()
    for show in catalog:
        if show.key_string == wanted:
            return Show(
                **to_summary(show).model_dump(),
                schedule=show.schedule,
                cast=list(show.cast),
                description=show.description,
                banner_image_url=show.banner_image_url,
                episodes=[Episode(**episode.to_dict()) for episode in show.episodes],
            )
    raise HTTPException(status_code=404, detail="Show not found")
