"""Tests for scoring, tie-breaking and limiting."""

import random
from datetime import datetime, timedelta, timezone

from browser_search.models import CanonicalRecord, Origin
from browser_search.ranking import (
    MIN_FRESHNESS,
    MIN_SCORE,
    fold,
    freshness,
    fuzzy_score,
    rank,
    take,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def visited(title, url, hours_ago, visits):
    return CanonicalRecord(
        title, url, "visited", Origin.HISTORY, visits, NOW - timedelta(hours=hours_ago)
    )


def bookmark(title, url):
    return CanonicalRecord(title, url, url, Origin.BOOKMARK)


def test_same_score_tie_broken_by_freshness():
    apple = visited("Apple", "https://apple.com", hours_ago=10, visits=1)  # freshness 10
    pie = visited("Apple Pie", "https://pie.org", hours_ago=25, visits=2)  # freshness 50
    banana = visited("Banana", "https://banana.org", hours_ago=1, visits=1)
    scores = {"Apple": 90, "Apple Pie": 90, "Banana": 40}

    ranked = rank([apple, banana, pie], "App", now=NOW, scorer=lambda q, t: scores[t])
    assert [r.title for r in ranked] == ["Apple Pie", "Apple", "Banana"]


def test_non_matches_are_dropped():
    records = [bookmark("Python docs", "https://docs.python.org"), bookmark("Rust", "https://rust-lang.org")]
    ranked = rank(records, "pyth", now=NOW)
    assert [r.title for r in ranked] == ["Python docs"]


def test_rank_is_deterministic():
    records = [
        visited("Example A", "https://a.example", 5, 2),
        visited("Example B", "https://b.example", 10, 1),
        bookmark("Example C", "https://c.example"),
        bookmark("Example", "https://d.example"),
        visited("Example A", "https://e.example", 5, 2),
    ]
    expected = rank(records, "example", now=NOW)
    for seed in range(5):
        shuffled = records[:]
        random.Random(seed).shuffle(shuffled)
        assert rank(shuffled, "example", now=NOW) == expected


def test_empty_query_orders_by_freshness():
    records = [
        bookmark("Bookmark", "https://b.org"),
        visited("Recent", "https://r.org", 1, 1),
        visited("Frequent", "https://f.org", 3, 10),
    ]
    ranked = rank(records, "", now=NOW)
    assert [r.title for r in ranked] == ["Frequent", "Recent", "Bookmark"]


def test_freshness():
    assert freshness(visited("x", "https://x", 10, 3), NOW) == 30
    assert freshness(visited("x", "https://x", 1.5, 4), NOW) == 4
    assert freshness(bookmark("x", "https://x"), NOW) == MIN_FRESHNESS


def test_freshness_future_visit_counts_as_zero():
    assert freshness(visited("x", "https://x", -5, 3), NOW) == 0


def test_freshness_unit_is_tunable():
    record = visited("x", "https://x", 48, 1)
    assert freshness(record, NOW, unit_seconds=86400) == 2


def test_fuzzy_score_basics():
    assert fuzzy_score("App", "Apple") > MIN_SCORE
    assert fuzzy_score("xyz", "Apple") == MIN_SCORE
    assert fuzzy_score("apl", "Apple") > MIN_SCORE


def test_fuzzy_score_prefers_contiguous_and_prefix():
    assert fuzzy_score("app", "Apple") > fuzzy_score("app", "Pineapple")
    assert fuzzy_score("app", "Pineapple") > fuzzy_score("app", "A paper plane")


def test_fuzzy_score_is_unicode_aware():
    assert fold("Café ÉLAN") == "cafe elan"
    assert fuzzy_score("cafe", "Café Central") > MIN_SCORE
    assert fuzzy_score("straße", "STRASSE") > MIN_SCORE


def test_fuzzy_score_operators():
    assert fuzzy_score("cat&dog", "cat only") == MIN_SCORE
    assert fuzzy_score("cat&dog", "cat and dog") > MIN_SCORE
    assert fuzzy_score("cat|dog", "dog park") > MIN_SCORE


def test_take_truncates_without_reordering():
    records = [bookmark(str(i), f"https://{i}.org") for i in range(5)]
    assert take(records, 3) == records[:3]
    assert take(records, 10) == records
    assert take(records, 0) == []
