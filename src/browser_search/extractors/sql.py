"""Bookmark and history extraction from browser SQLite stores.

Every function takes a connection to a snapshot (never the live file) and
only reads from it.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from datetime import datetime

from browser_search.exceptions import ExtractionFailed
from browser_search.extractors.parser import parse_bookmark, parse_history_row
from browser_search.models import CanonicalRecord
from browser_search.query import filter_records
from browser_search.timestamps import (
    chrome_to_datetime,
    mozilla_to_datetime,
    webkit_to_datetime,
)

logger = logging.getLogger(__name__)

CHROMIUM_HISTORY_SQL = """
    SELECT DISTINCT
        u.url AS url,
        u.title AS title,
        u.visit_count AS visit_count,
        u.last_visit_time AS last_visit
    FROM urls u
    JOIN visits v ON v.url = u.id
    WHERE u.title IS NOT NULL
      AND u.title != ''
      AND u.url IS NOT NULL
      AND u.url != ''
    ORDER BY last_visit DESC
"""

# SQLite fills bare columns from the row holding MAX(), so `title` is the
# title of the most recent visit.
WEBKIT_HISTORY_SQL = """
    SELECT
        hi.url AS url,
        hv.title AS title,
        hi.visit_count AS visit_count,
        MAX(hv.visit_time) AS last_visit
    FROM history_items hi
    JOIN history_visits hv ON hv.history_item = hi.id
    WHERE hi.url IS NOT NULL
      AND hi.url != ''
      AND hv.title IS NOT NULL
      AND hv.title != ''
    GROUP BY hi.id
    ORDER BY hi.visit_count DESC
"""

MOZILLA_HISTORY_SQL = """
    SELECT DISTINCT
        p.url AS url,
        p.title AS title,
        p.visit_count AS visit_count,
        p.last_visit_date AS last_visit
    FROM moz_places p
    JOIN moz_historyvisits hv ON hv.place_id = p.id
    WHERE p.title IS NOT NULL
      AND p.title != ''
      AND p.url IS NOT NULL
      AND p.url != ''
    ORDER BY last_visit DESC
"""

# moz_bookmarks.type: 1 = bookmark, 2 = folder, 3 = separator.
MOZILLA_BOOKMARK_TYPE = 1

MOZILLA_BOOKMARKS_SQL = """
    SELECT b.title AS title, p.url AS url
    FROM moz_bookmarks b
    JOIN moz_places p ON b.fk = p.id
    WHERE b.type = ?
      AND p.url IS NOT NULL
      AND b.title IS NOT NULL
"""


def extract_chromium_history(
    conn: sqlite3.Connection,
    query: str,
    date_format: str,
    ignored_domains: tuple[str, ...] = (),
) -> list[CanonicalRecord]:
    """History from a Chromium-family `History` database.

    Rows whose URL contains any of `ignored_domains` are dropped.
    """
    rows = _fetch(conn, CHROMIUM_HISTORY_SQL, "Chromium history")
    return filter_records(
        _history_records(rows, chrome_to_datetime, date_format, ignored_domains),
        query,
    )


def extract_webkit_history(
    conn: sqlite3.Connection,
    query: str,
    date_format: str,
) -> list[CanonicalRecord]:
    """History from Safari's `History.db`."""
    rows = _fetch(conn, WEBKIT_HISTORY_SQL, "Safari history")
    return filter_records(
        _history_records(rows, webkit_to_datetime, date_format), query
    )


def extract_mozilla_history(
    conn: sqlite3.Connection,
    query: str,
    date_format: str,
) -> list[CanonicalRecord]:
    """History from a Firefox-family `places.sqlite`."""
    rows = _fetch(conn, MOZILLA_HISTORY_SQL, "Mozilla history")
    return filter_records(
        _history_records(rows, mozilla_to_datetime, date_format), query
    )


def extract_mozilla_bookmarks(conn: sqlite3.Connection, query: str) -> list[CanonicalRecord]:
    """Real bookmarks (no folders or separators) from `places.sqlite`."""
    rows = _fetch(conn, MOZILLA_BOOKMARKS_SQL, "Mozilla bookmarks", (MOZILLA_BOOKMARK_TYPE,))
    records = []
    for row in rows:
        record = parse_bookmark(row["title"], row["url"])
        if record is not None:
            records.append(record)
    return filter_records(records, query)


def _fetch(
    conn: sqlite3.Connection,
    sql: str,
    label: str,
    params: tuple = (),
) -> list[sqlite3.Row]:
    conn.row_factory = sqlite3.Row
    try:
        return conn.execute(sql, params).fetchall()
    except sqlite3.Error as e:
        raise ExtractionFailed(f"Failed querying {label}: {e}") from e


def _history_records(
    rows: list[sqlite3.Row],
    to_datetime: Callable[[object], datetime | None],
    date_format: str,
    ignored_domains: tuple[str, ...] = (),
) -> list[CanonicalRecord]:
    records = []
    dropped = 0
    for row in rows:
        raw = dict(row)
        record = parse_history_row(
            raw,
            last_visit=to_datetime(raw.get("last_visit")),
            date_format=date_format,
            ignored_domains=ignored_domains,
        )
        if record is None:
            dropped += 1
            continue
        records.append(record)

    if dropped:
        logger.debug("Dropped %d history rows without usable visit data", dropped)
    return records
