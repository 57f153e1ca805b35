"""Per-format extractors producing canonical records."""

from browser_search.extractors.parser import parse_bookmark, parse_history_row
from browser_search.extractors.sql import (
    extract_chromium_history,
    extract_mozilla_bookmarks,
    extract_mozilla_history,
    extract_webkit_history,
)
from browser_search.extractors.tree import (
    extract_chromium_bookmarks,
    extract_webkit_bookmarks,
    walk_bookmarks,
)

__all__ = [
    "parse_bookmark",
    "parse_history_row",
    "extract_chromium_history",
    "extract_mozilla_bookmarks",
    "extract_mozilla_history",
    "extract_webkit_history",
    "extract_chromium_bookmarks",
    "extract_webkit_bookmarks",
    "walk_bookmarks",
]
