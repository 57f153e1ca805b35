"""Tests for source discovery."""

from browser_search.config import SearchConfig
from browser_search.registry import (
    HistorySchema,
    Source,
    SourcePaths,
    TreeFormat,
    discover,
)


def _touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path


def test_zero_enabled_sources(tmp_path):
    assert discover(SearchConfig(), home=tmp_path) == {}


def test_disabled_source_is_omitted(tmp_path):
    _touch(tmp_path / "Library" / "Safari" / "History.db")
    config = SearchConfig(enabled_sources=frozenset({Source.CHROME}))
    found = discover(config, home=tmp_path)
    assert Source.SAFARI not in found
    assert found[Source.CHROME] == SourcePaths(history=None, bookmarks=None)


def test_chromium_paths(tmp_path):
    base = tmp_path / "Library" / "Application Support" / "Google" / "Chrome" / "Default"
    history = _touch(base / "History")
    config = SearchConfig(enabled_sources=frozenset({Source.CHROME}))
    found = discover(config, home=tmp_path)
    assert found[Source.CHROME].history == history
    assert found[Source.CHROME].bookmarks is None


def test_mozilla_profile_scan_picks_first_profile_with_db(tmp_path):
    profiles = tmp_path / "Library" / "Application Support" / "Firefox" / "Profiles"
    (profiles / "aaa.empty").mkdir(parents=True)
    db = _touch(profiles / "bbb.default" / "places.sqlite")
    _touch(profiles / "ccc.other" / "places.sqlite")
    config = SearchConfig(enabled_sources=frozenset({Source.FIREFOX}))

    found = discover(config, home=tmp_path)
    assert found[Source.FIREFOX].history == db
    assert found[Source.FIREFOX].bookmarks == db


def test_mozilla_without_profiles(tmp_path):
    config = SearchConfig(enabled_sources=frozenset({Source.ZEN}))
    found = discover(config, home=tmp_path)
    assert found[Source.ZEN] == SourcePaths()


def test_source_classification():
    assert Source.SAFARI.tree_format is TreeFormat.WEBKIT_PLIST
    assert Source.SAFARI.history_schema is HistorySchema.WEBKIT_SQL
    assert Source.ZEN.history_schema is HistorySchema.MOZILLA_SQL
    assert not Source.SAFARI.is_chromium_like
    assert Source.ARC.is_chromium_like
    assert all(source.display_name for source in Source)
