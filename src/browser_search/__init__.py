"""Ranked search over local browser bookmarks and history (macOS)."""

from browser_search.aggregate import merge
from browser_search.config import SearchConfig
from browser_search.engine import BrowserSearch
from browser_search.models import CanonicalRecord, Origin
from browser_search.query import matches
from browser_search.ranking import rank, take
from browser_search.registry import Source, SourcePaths, discover

__all__ = [
    "merge",
    "SearchConfig",
    "BrowserSearch",
    "CanonicalRecord",
    "Origin",
    "matches",
    "rank",
    "take",
    "Source",
    "SourcePaths",
    "discover",
]
