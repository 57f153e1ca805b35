"""Tests for the warm-start result cache."""

from datetime import datetime, timezone

import pytest

from browser_search.cache import ResultCache
from browser_search.exceptions import CacheUnavailable
from browser_search.models import CanonicalRecord, Origin

VISITED = datetime(2024, 2, 29, 23, 59, 30, tzinfo=timezone.utc)


def test_missing_key_returns_none(tmp_path):
    assert ResultCache(tmp_path).get("history") is None


def test_put_then_get(tmp_path):
    cache = ResultCache(tmp_path / "cache")
    records = [
        CanonicalRecord("Ünïcode", "https://u.org", "visited", Origin.HISTORY, 2, VISITED),
        CanonicalRecord("Mark", "https://m.org", "https://m.org", Origin.BOOKMARK),
    ]
    cache.put("history", records)
    assert cache.get("history") == records
    assert cache.last_updated() is not None


def test_corrupt_cache_raises(tmp_path):
    (tmp_path / "history.cache").write_text("{oops", encoding="utf-8")
    with pytest.raises(CacheUnavailable):
        ResultCache(tmp_path).get("history")


def test_invalid_record_raises(tmp_path):
    (tmp_path / "history.cache").write_text(
        '[{"title": "x", "url": "https://x", "origin": "history"}]', encoding="utf-8"
    )
    with pytest.raises(CacheUnavailable):
        ResultCache(tmp_path).get("history")


def test_unwritable_directory_raises(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(CacheUnavailable):
        ResultCache(blocker / "cache").put("history", [])


def test_last_updated_without_writes(tmp_path):
    assert ResultCache(tmp_path).last_updated() is None
