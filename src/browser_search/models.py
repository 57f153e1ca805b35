"""Data models shared by every stage of the search pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Origin(str, Enum):
    """Which kind of store a record came from."""

    BOOKMARK = "bookmark"
    HISTORY = "history"


@dataclass(frozen=True)
class CanonicalRecord:
    """A normalized bookmark or history entry.

    `url` is the identity key used for deduplication. History records always
    carry both `visit_count` and `last_visit` (a timezone-aware UTC datetime).
    """

    title: str
    url: str
    subtitle: str
    origin: Origin
    visit_count: int | None = None
    last_visit: datetime | None = None
    favicon: str | None = None

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("CanonicalRecord.url must not be empty")
        if self.origin is Origin.HISTORY and (
            self.visit_count is None or self.last_visit is None
        ):
            raise ValueError(
                f"History record for {self.url} needs visit_count and last_visit"
            )

    @property
    def is_bookmark(self) -> bool:
        return self.origin is Origin.BOOKMARK
