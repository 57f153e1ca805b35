"""Normalize raw bookmark/history rows into canonical records."""

from __future__ import annotations

from datetime import datetime

from browser_search.models import CanonicalRecord, Origin

HISTORY_SUBTITLE = "Last visit: {date} (Visits: {count})"


def parse_bookmark(title: object, url: object) -> CanonicalRecord | None:
    """Returns None for rows without a usable title or URL."""
    if not isinstance(title, str) or not isinstance(url, str):
        return None
    url = url.strip()
    if not url:
        return None

    return CanonicalRecord(
        title=title.strip(),
        url=url,
        subtitle=url,
        origin=Origin.BOOKMARK,
    )


def parse_history_row(
    raw: dict,
    last_visit: datetime | None,
    date_format: str,
    ignored_domains: tuple[str, ...] = (),
) -> CanonicalRecord | None:
    """Normalize one history row; returns None for filtered/invalid rows.

    `last_visit` is the row's visit time already converted from the
    source's epoch. Rows missing a visit time or count are dropped, as are
    rows whose URL contains any of `ignored_domains`.
    """
    url = (raw.get("url") or "").strip()
    title = (raw.get("title") or "").strip()
    if not url or not title:
        return None

    if is_ignored(url, ignored_domains):
        return None

    visit_count = raw.get("visit_count")
    if visit_count is None or last_visit is None:
        return None
    try:
        visit_count = max(0, int(visit_count))
    except (TypeError, ValueError):
        return None

    return CanonicalRecord(
        title=title,
        url=url,
        subtitle=HISTORY_SUBTITLE.format(
            date=format_visit_date(last_visit, date_format),
            count=visit_count,
        ),
        origin=Origin.HISTORY,
        visit_count=visit_count,
        last_visit=last_visit,
    )


def is_ignored(url: str, ignored_domains: tuple[str, ...]) -> bool:
    """True if `url` contains any ignore-list entry."""
    return any(domain in url for domain in ignored_domains)


def format_visit_date(dt: datetime, date_format: str) -> str:
    """Render a visit time for display; never used for ranking."""
    try:
        return dt.strftime(date_format)
    except ValueError:
        return dt.date().isoformat()
