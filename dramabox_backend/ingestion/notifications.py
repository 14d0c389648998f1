from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

import requests

from dramabox_backend.ingestion.catalog_merge import NewEpisode
from dramabox_backend.models.shows import ShowRecord
from dramabox_backend.utils.normalization import show_key_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    identifier: str
    title: str
    body: str


class NotificationSink(Protocol):
    def deliver(self, notification: Notification) -> None: ...


class LoggingNotificationSink(NotificationSink):
    """Default sink when no delivery endpoint is configured."""

    def deliver(self, notification: Notification) -> None:
        logger.info("NOTIFY %s: %s (%s)", notification.title, notification.body, notification.identifier)


class WebhookNotificationSink(NotificationSink):
    """POSTs each notification as JSON (Discord, Slack, ntfy and similar webhooks)."""

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._url = url
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def deliver(self, notification: Notification) -> None:
        text = f"{notification.title}\n{notification.body}"
        resp = self._session.post(
            self._url,
            json={
                "id": notification.identifier,
                "title": notification.title,
                "content": text,
                "text": text,
            },
            timeout=self._timeout_seconds,
        )
        resp.raise_for_status()


def _salt(clock: Callable[[], float]) -> str:
    return str(int(clock() * 1000))


class NotificationDispatcher:
    """
    Fire-and-forget alerts for newly discovered shows and episodes.

    Identifiers combine the item identity with a millisecond timestamp salt, so an
    item that turns "new" again after cache loss is notified again instead of
    colliding with an earlier notification.
    """

    def __init__(self, sink: NotificationSink | None = None, *, clock: Callable[[], float] = time.time) -> None:
        self._sink = sink or LoggingNotificationSink()
        self._clock = clock

    def build(self, new_shows: Iterable[ShowRecord], new_episodes: Iterable[NewEpisode]) -> list[Notification]:
        salt = _salt(self._clock)
        notifications: list[Notification] = []
        for show in new_shows:
            notifications.append(
                Notification(
                    identifier=f"show:{show.key_string}:{salt}",
                    title="New show available",
                    body=f"{show.title} ({show.year})" if show.year else show.title,
                )
            )
        for item in new_episodes:
            notifications.append(
                Notification(
                    identifier=f"episode:{show_key_string(item.show_title, item.show_year)}:{item.episode.title}:{salt}",
                    title=f"New episode of {item.show_title}",
                    body=item.episode.title,
                )
            )
        return notifications

    def dispatch(self, new_shows: Iterable[ShowRecord], new_episodes: Iterable[NewEpisode]) -> list[Notification]:
        """Deliver one notification per item; returns those that were delivered."""

        delivered: list[Notification] = []
        for notification in self.build(new_shows, new_episodes):
            try:
                self._sink.deliver(notification)
            except (requests.RequestException, OSError, RuntimeError) as exc:
                logger.warning("Failed to deliver notification %s: %s", notification.identifier, exc)
                continue
            delivered.append(notification)
        return delivered
