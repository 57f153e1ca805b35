"""On-disk cache of record batches, used as a best-effort warm start."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import dateutil.parser

from browser_search.exceptions import CacheUnavailable
from browser_search.models import CanonicalRecord, Origin

logger = logging.getLogger(__name__)

CACHE_SUFFIX = ".cache"
TIMESTAMP_FILE = "last_updated.txt"


class RecordCache(Protocol):
    def get(self, key: str) -> list[CanonicalRecord] | None:
        ...

    def put(self, key: str, records: list[CanonicalRecord]) -> None:
        ...


class ResultCache:
    """One JSON file per key under `directory`.

    Raises CacheUnavailable on any read, write or decode failure; callers are
    expected to degrade rather than fail.
    """

    def __init__(self, directory: Path):
        self.directory = directory

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}{CACHE_SUFFIX}"

    def get(self, key: str) -> list[CanonicalRecord] | None:
        """Cached batch for `key`, or None if nothing was stored."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            return [_decode(item) for item in payload]
        except (OSError, ValueError, TypeError, KeyError) as e:
            raise CacheUnavailable(f"Cannot read cache {path}: {e}") from e

    def put(self, key: str, records: list[CanonicalRecord]) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps([_encode(r) for r in records], ensure_ascii=False),
                encoding="utf-8",
            )
            (self.directory / TIMESTAMP_FILE).write_text(
                datetime.now(timezone.utc).isoformat(), encoding="utf-8"
            )
        except OSError as e:
            raise CacheUnavailable(f"Cannot write cache {path}: {e}") from e

    def last_updated(self) -> datetime | None:
        """When any batch was last written, if known."""
        try:
            raw = (self.directory / TIMESTAMP_FILE).read_text(encoding="utf-8").strip()
            return dateutil.parser.isoparse(raw)
        except (OSError, ValueError):
            return None


def _encode(record: CanonicalRecord) -> dict:
    return {
        "title": record.title,
        "url": record.url,
        "subtitle": record.subtitle,
        "origin": record.origin.value,
        "visit_count": record.visit_count,
        "last_visit": record.last_visit.isoformat() if record.last_visit else None,
    }


def _decode(item: dict) -> CanonicalRecord:
    last_visit = item.get("last_visit")
    return CanonicalRecord(
        title=item["title"],
        url=item["url"],
        subtitle=item.get("subtitle") or item["url"],
        origin=Origin(item["origin"]),
        visit_count=item.get("visit_count"),
        last_visit=dateutil.parser.isoparse(last_visit) if last_visit else None,
    )
