"""Merge per-source batches into one record per URL."""

from __future__ import annotations

from collections.abc import Iterable
from itertools import chain

from browser_search.models import CanonicalRecord, Origin


def merge(batches: Iterable[Iterable[CanonicalRecord]]) -> list[CanonicalRecord]:
    """Concatenate batches and keep exactly one record per URL.

    Bookmarks win over history for the same URL; between records of the same
    origin, the alphabetically first title wins (then the first URL-equal
    record in sort order, so the result does not depend on batch order).
    """
    ordered = sorted(chain.from_iterable(batches), key=_preference)

    seen: set[str] = set()
    unique: list[CanonicalRecord] = []
    for record in ordered:
        if record.url in seen:
            continue
        seen.add(record.url)
        unique.append(record)
    return unique


def _preference(record: CanonicalRecord) -> tuple:
    last_visit = record.last_visit.timestamp() if record.last_visit else 0.0
    return (
        record.origin is Origin.HISTORY,
        record.title,
        record.url,
        -(record.visit_count or 0),
        -last_visit,
        record.subtitle,
    )
