from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from threading import Lock

from dramabox_backend.models.shows import ShowRecord

logger = logging.getLogger(__name__)

CatalogListener = Callable[[list[ShowRecord]], None]


class CatalogState:
    """
    In-memory catalog shared with a presentation layer.

    Consumers register a listener with `subscribe()`; every `publish()` replaces the
    catalog and notifies listeners with the new list. A failing listener is logged
    and does not stop the others.
    """

    def __init__(self, shows: Iterable[ShowRecord] = ()) -> None:
        self._shows: list[ShowRecord] = list(shows)
        self._listeners: list[CatalogListener] = []
        self._lock = Lock()

    @property
    def shows(self) -> list[ShowRecord]:
        with self._lock:
            return list(self._shows)

    def subscribe(self, listener: CatalogListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, shows: Iterable[ShowRecord]) -> None:
        with self._lock:
            self._shows = list(shows)
            snapshot = list(self._shows)
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:  # noqa: BLE001
                logger.exception("Catalog listener %r failed", listener)


def group_by_genre(shows: Iterable[ShowRecord]) -> dict[str, list[ShowRecord]]:
    """
    Project shows into genre buckets. A show appears once under each of its genres;
    genres keep first-seen order.
    """

    grouped: dict[str, list[ShowRecord]] = {}
    for show in shows:
        seen: set[str] = set()
        for genre in show.genres:
            name = genre.strip()
            if not name or name.casefold() in seen:
                continue
            seen.add(name.casefold())
            bucket = next((k for k in grouped if k.casefold() == name.casefold()), name)
            grouped.setdefault(bucket, []).append(show)
    return grouped


def shows_for_genre(shows: Iterable[ShowRecord], genre: str) -> list[ShowRecord]:
    wanted = (genre or "").strip().casefold()
    if not wanted:
        return []
    return [show for show in shows if any(g.strip().casefold() == wanted for g in show.genres)]


def search_shows(shows: Iterable[ShowRecord], query: str) -> list[ShowRecord]:
    needle = (query or "").strip().casefold()
    if not needle:
        return list(shows)
    return [
        show
        for show in shows
        if needle in show.title.casefold() or needle in (show.subtitle or "").casefold()
    ]
