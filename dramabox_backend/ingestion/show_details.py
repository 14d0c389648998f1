from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import TypeVar

from dramabox_backend.integrations.tvb.fetcher import NetworkError
from dramabox_backend.integrations.tvb.parser import ParseError
from dramabox_backend.models.shows import CatalogEntry, ShowRecord

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 30
DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_DELAY_SECONDS = 0.1

T = TypeVar("T")


@dataclass(frozen=True)
class DetailFetchFailure:
    entry: CatalogEntry
    message: str
    attempts: int


@dataclass
class DetailFetchSummary:
    attempted: int = 0
    records: list[ShowRecord] = field(default_factory=list)
    failures: list[DetailFetchFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.records)

    @property
    def failed(self) -> int:
        return len(self.failures)


class RetriesExhaustedError(RuntimeError):
    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


def call_with_retries(
    func: Callable[[], T],
    *,
    max_retries: int = DEFAULT_MAX_RETRIES,
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run `func`, retrying up to `max_retries` more times on `NetworkError` with a fixed
    delay between attempts. Other exceptions propagate on the first occurrence.
    """

    attempts = 0
    while True:
        attempts += 1
        try:
            return func()
        except NetworkError as exc:
            if attempts > max_retries:
                raise RetriesExhaustedError(str(exc), attempts=attempts) from exc
            logger.debug("Attempt %d failed (%s); retrying in %.2fs", attempts, exc, retry_delay_seconds)
            sleep(retry_delay_seconds)


def _batched(items: Sequence[T], size: int) -> Iterable[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def fetch_show_details(
    entries: Iterable[CatalogEntry],
    fetch_detail: Callable[[CatalogEntry], ShowRecord],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_retries: int = DEFAULT_MAX_RETRIES,
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> DetailFetchSummary:
    """
    Fetch and parse one detail page per entry, `batch_size` at a time.

    Each batch runs on its own thread pool and the next batch starts only after every
    task of the previous one has resolved. Entries that exhaust their retries or fail
    to parse are reported in `failures` and left for the next sync cycle; the order of
    `records` is not meaningful.
    """

    batch_size = max(1, int(batch_size or 1))
    items = list(entries)
    summary = DetailFetchSummary()

    def run_one(entry: CatalogEntry) -> tuple[ShowRecord | None, DetailFetchFailure | None]:
        try:
            record = call_with_retries(
                lambda: fetch_detail(entry),
                max_retries=max_retries,
                retry_delay_seconds=retry_delay_seconds,
                sleep=sleep,
            )
        except RetriesExhaustedError as exc:
            return None, DetailFetchFailure(entry=entry, message=str(exc), attempts=exc.attempts)
        except (ParseError, ValueError) as exc:
            return None, DetailFetchFailure(entry=entry, message=str(exc), attempts=1)
        return record, None

    for batch_index, batch in enumerate(_batched(items, batch_size), start=1):
        with ThreadPoolExecutor(max_workers=len(batch)) as pool:
            futures = [pool.submit(run_one, entry) for entry in batch]
            for fut in as_completed(futures):
                summary.attempted += 1
                record, failure = fut.result()
                if failure is not None:
                    logger.warning(
                        "Dropping %r after %d attempt(s): %s",
                        failure.entry.title,
                        failure.attempts,
                        failure.message,
                    )
                    summary.failures.append(failure)
                    continue
                if record is not None:
                    summary.records.append(record)
        logger.info(
            "Detail batch %d done: %d/%d fetched so far, %d failed",
            batch_index,
            summary.succeeded,
            len(items),
            summary.failed,
        )

    return summary
