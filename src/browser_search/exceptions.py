"""Unified exception hierarchy for browser-search."""


class BrowserSearchError(Exception):
    """Base exception for all browser-search errors."""


# Sources
class SourceUnavailable(BrowserSearchError):
    """A source's bookmark or history store is not present on disk."""


class SnapshotFailed(BrowserSearchError):
    """Failed to take a readable snapshot of a source database."""


class ExtractionFailed(BrowserSearchError):
    """A source store could not be parsed or queried."""


# Cache
class CacheUnavailable(BrowserSearchError):
    """The result cache could not be read or written."""


# Configuration
class ConfigParseError(BrowserSearchError):
    """Malformed configuration; the invocation cannot continue."""
