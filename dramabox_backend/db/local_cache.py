from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from dramabox_backend.models.shows import ShowRecord

logger = logging.getLogger(__name__)


class CacheMissError(RuntimeError):
    """No usable snapshot: the file is missing, unreadable or corrupt."""


class LocalCacheStore:
    """
    Last known catalog snapshot as a single JSON array file.

    `save()` replaces the file atomically (temp file in the same directory, then
    `os.replace`), so a concurrent reader sees either the old or the new snapshot.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def save(self, records: Iterable[ShowRecord]) -> None:
        payload = [record.to_dict() for record in records]
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        logger.info("Saved %d shows to %s", len(payload), self.path)

    def load(self) -> list[ShowRecord]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CacheMissError(f"No catalog cache at {self.path}") from exc
        except UnicodeDecodeError as exc:
            raise CacheMissError(f"Corrupt catalog cache at {self.path}: not UTF-8 ({exc})") from exc
        except OSError as exc:
            raise CacheMissError(f"Unreadable catalog cache at {self.path}: {exc}") from exc

        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise CacheMissError(f"Corrupt catalog cache at {self.path}: {exc}") from exc

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise CacheMissError(f"Corrupt catalog cache at {self.path}: expected a JSON array of shows")

        records = [ShowRecord.from_dict(item) for item in data]
        logger.info("Loaded %d shows from %s", len(records), self.path)
        return records

    def load_or_empty(self) -> list[ShowRecord]:
        try:
            return self.load()
        except CacheMissError as exc:
            logger.warning("Starting from an empty baseline: %s", exc)
            return []
