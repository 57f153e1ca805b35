"""Fuzzy scoring of records against a query, with a recency tie-break."""

from __future__ import annotations

import unicodedata
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timezone
from difflib import SequenceMatcher
from itertools import groupby

from browser_search.config import DEFAULT_FRESHNESS_UNIT_SECONDS
from browser_search.models import CanonicalRecord
from browser_search.query import split_terms

MIN_SCORE = 0
# Every record scores this when the query is empty, so only freshness orders them.
EMPTY_QUERY_SCORE = 1
# Records without visit data sort after every visited record in a tie.
MIN_FRESHNESS = -1

CONTAINS_BONUS = 50
PREFIX_BONUS = 25
WORD_START_BONUS = 15

Scorer = Callable[[str, str], int]


def fold(text: str) -> str:
    """Case- and accent-insensitive form used for matching ("Café" -> "cafe")."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def _is_subsequence(needle: str, haystack: str) -> bool:
    it = iter(haystack)
    return all(c in it for c in needle)


def term_score(term: str, title: str) -> int:
    """Score one folded term against a folded title; MIN_SCORE if no match.

    A match needs every term character to appear in the title in order.
    Contiguous, prefix and word-start matches score higher.
    """
    if not term or not _is_subsequence(term, title):
        return MIN_SCORE

    score = 1 + round(100 * SequenceMatcher(None, term, title, autojunk=False).ratio())
    if term in title:
        score += CONTAINS_BONUS
        if title.startswith(term):
            score += PREFIX_BONUS
        elif any(word.startswith(term) for word in title.split()):
            score += WORD_START_BONUS
    return score


def fuzzy_score(query: str, title: str) -> int:
    """Score a title against a query using the query language's operators.

    `a&b` scores the weakest term and needs all of them to match; `a|b`
    scores the best matching term.
    """
    operator, terms = split_terms(query)
    folded_title = fold(title)
    scores = [term_score(fold(term), folded_title) for term in terms if term]
    if not scores:
        return MIN_SCORE
    if operator == "and":
        return min(scores)
    return max(scores)


def freshness(
    record: CanonicalRecord,
    now: datetime,
    unit_seconds: int = DEFAULT_FRESHNESS_UNIT_SECONDS,
) -> int:
    """Whole units (hours by default) since the last visit, times the visit count.

    Negative ages (clock skew, future visit times) count as zero.
    """
    if record.visit_count is None or record.last_visit is None:
        return MIN_FRESHNESS
    age = (now - record.last_visit).total_seconds()
    units = max(0, int(age // unit_seconds))
    return units * record.visit_count


def rank(
    records: Iterable[CanonicalRecord],
    query: str,
    now: datetime | None = None,
    scorer: Scorer = fuzzy_score,
    unit_seconds: int = DEFAULT_FRESHNESS_UNIT_SECONDS,
) -> list[CanonicalRecord]:
    """Order matching records by score, breaking ties by freshness.

    Non-matching records are dropped. `now` is captured once so every
    freshness value in the call shares one baseline. Records equal on both
    score and freshness fall back to title then URL, so the output does not
    depend on input order.
    """
    now = now or datetime.now(timezone.utc)
    blank = not split_terms(query)[1]

    scored = []
    for record in records:
        score = EMPTY_QUERY_SCORE if blank else scorer(query, record.title)
        if score > MIN_SCORE:
            scored.append((score, record))
    scored.sort(key=lambda pair: (-pair[0], pair[1].title, pair[1].url))

    ranked: list[CanonicalRecord] = []
    for _, group in groupby(scored, key=lambda pair: pair[0]):
        members = [record for _, record in group]
        if len(members) > 1:
            members = _break_tie(members, now, unit_seconds)
        ranked.extend(members)
    return ranked


def _break_tie(
    members: list[CanonicalRecord],
    now: datetime,
    unit_seconds: int,
) -> list[CanonicalRecord]:
    # Members arrive sorted by (title, url); sort is stable.
    return sorted(members, key=lambda r: freshness(r, now, unit_seconds), reverse=True)


def take(ranked: Sequence[CanonicalRecord], n: int) -> list[CanonicalRecord]:
    """First `n` records; never reorders."""
    return list(ranked[: max(0, n)])
