from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from dramabox_backend.utils.normalization import ShowKey, show_key, show_key_string


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_optional_str(value: Any) -> str | None:
    text = _as_str(value)
    return text or None


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _as_optional_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


@dataclass(frozen=True)
class Episode:
    """
    A playable episode of a show.

    Identity is the exact title within its parent show; the URL is not part of it.
    """

    title: str
    url: str
    thumbnail_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "thumbnail_url": self.thumbnail_url,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Episode":
        return cls(
            title=_as_str(data.get("title")),
            url=_as_str(data.get("url")),
            thumbnail_url=_as_optional_str(data.get("thumbnail_url")),
        )


@dataclass(frozen=True)
class CatalogEntry:
    """One show tile on the catalog page: enough to fetch its detail page."""

    title: str
    detail_url: str
    thumbnail_url: str


@dataclass(frozen=True)
class ShowRecord:
    """
    Canonical catalog unit (maps to the `show_details` table and one element of the
    local cache array).

    Note: `remote_id` is only known once the show has been persisted remotely.
    """

    title: str
    year: str
    schedule: str = ""
    subtitle: str | None = None
    genres: list[str] = field(default_factory=list)
    cast: list[str] = field(default_factory=list)
    description: str = ""
    thumb_image_url: str | None = None
    banner_image_url: str | None = None
    episodes: list[Episode] = field(default_factory=list)
    remote_id: int | None = None

    @property
    def key(self) -> ShowKey:
        return show_key(self.title, self.year)

    @property
    def key_string(self) -> str:
        return show_key_string(self.title, self.year)

    @property
    def episode_titles(self) -> set[str]:
        return {episode.title for episode in self.episodes}

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "subtitle": self.subtitle,
            "schedule": self.schedule,
            "genres": list(self.genres),
            "cast": list(self.cast),
            "year": self.year,
            "description": self.description,
            "thumb_image_url": self.thumb_image_url,
            "banner_image_url": self.banner_image_url,
            "episodes": [episode.to_dict() for episode in self.episodes],
        }

    def to_row(self) -> dict[str, Any]:
        """Insert payload for `show_details` (episodes live in their own table)."""

        row = self.to_dict()
        row.pop("episodes")
        row["subtitle"] = self.subtitle or ""
        return row

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ShowRecord":
        """
        Decode a cached snapshot element or a remote `show_details` row.

        Remote rows embed episodes via `select("*, episodes(*)")` and carry `id`.
        """

        raw_episodes = data.get("episodes")
        episodes: list[Episode] = []
        if isinstance(raw_episodes, list):
            for item in raw_episodes:
                if isinstance(item, Mapping):
                    episode = Episode.from_dict(item)
                    if episode.title:
                        episodes.append(episode)

        return cls(
            title=_as_str(data.get("title")),
            year=_as_str(data.get("year")),
            schedule=_as_str(data.get("schedule")),
            subtitle=_as_optional_str(data.get("subtitle")),
            genres=_as_str_list(data.get("genres")),
            cast=_as_str_list(data.get("cast")),
            description=_as_str(data.get("description")),
            thumb_image_url=_as_optional_str(data.get("thumb_image_url")),
            banner_image_url=_as_optional_str(data.get("banner_image_url")),
            episodes=episodes,
            remote_id=_as_optional_int(data.get("id")),
        )
