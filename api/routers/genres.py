"""
Genre groupings derived from the catalog on every request.
"""
from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from api.deps import Catalog
from api.routers.shows import ShowSummary, to_summary
from dramabox_backend.models.catalog import group_by_genre, shows_for_genre

router = APIRouter(prefix="/genres", tags=["genres"])


class Genre(BaseModel):
    name: str
    show_count: int


@router.get("", response_model=list[Genre])
def list_genres(catalog: Catalog) -> list[Genre]:
    grouped = group_by_genre(catalog)
    return [
        Genre(name=name, show_count=len(members))
        for name, members in sorted(grouped.items(), key=lambda kv: kv[0].casefold())
    ]


@router.get("/{genre}", response_model=list[ShowSummary])
def list_genre_shows(catalog: Catalog, genre: str) -> list[ShowSummary]:
    return [to_summary(show) for show in shows_for_genre(catalog, genre)]
