"""Query language: `a&b` (all terms), `a|b` (any term), otherwise substring.

Every comparison is case-insensitive. A record matches when its title, URL or
subtitle matches.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from browser_search.models import CanonicalRecord

Operator = Literal["and", "or", "single"]


def split_terms(query: str) -> tuple[Operator, list[str]]:
    """Split a query into its operator and lower-cased, trimmed terms.

    `&` takes precedence over `|` when a query contains both. Blank terms
    (as in `a&` or a lone `|`) are dropped.
    """
    if "&" in query:
        return "and", _terms(query.split("&"))
    if "|" in query:
        return "or", _terms(query.split("|"))
    return "single", _terms([query])


def _terms(parts: list[str]) -> list[str]:
    return [t.strip().lower() for t in parts if t.strip()]


def normalize_query(query: str) -> str:
    """Trimmed query, or "" when it holds no searchable term."""
    query = query.strip()
    _, terms = split_terms(query)
    return query if terms else ""


def matches(query: str, text: str) -> bool:
    operator, terms = split_terms(query)
    if not terms:
        return True

    text_lower = text.lower()
    if operator == "and":
        return all(term in text_lower for term in terms)
    return any(term in text_lower for term in terms)


def record_matches(record: CanonicalRecord, query: str) -> bool:
    return (
        matches(query, record.title)
        or matches(query, record.url)
        or matches(query, record.subtitle)
    )


def filter_records(records: Iterable[CanonicalRecord], query: str) -> list[CanonicalRecord]:
    """Keep the records that match `query` in any searchable field."""
    if not query:
        return list(records)
    return [r for r in records if record_matches(r, query)]
