"""Enumerate enabled browser sources and resolve their files (macOS layout)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from browser_search.config import SearchConfig

logger = logging.getLogger(__name__)

APP_SUPPORT = Path("Library") / "Application Support"

# Firefox-family browsers keep bookmarks and history in one database per profile.
MOZILLA_DB_NAME = "places.sqlite"


class TreeFormat(str, Enum):
    """On-disk format of a source's bookmark store."""

    CHROMIUM_JSON = "chromium-json"
    WEBKIT_PLIST = "webkit-plist"
    MOZILLA_SQL = "mozilla-sql"


class HistorySchema(str, Enum):
    """SQL schema family of a source's history store."""

    CHROMIUM_SQL = "chromium-sql"
    WEBKIT_SQL = "webkit-sql"
    MOZILLA_SQL = "mozilla-sql"


class Source(str, Enum):
    """Supported browsers. The value doubles as the enable-flag option name."""

    CHROME = "chrome"
    CHROME_BETA = "chrome_beta"
    BRAVE = "brave"
    BRAVE_BETA = "brave_beta"
    SAFARI = "safari"
    FIREFOX = "firefox"
    ZEN = "zen"
    EDGE = "edge"
    OPERA = "opera"
    VIVALDI = "vivaldi"
    ARC = "arc"
    CHROMIUM = "chromium"
    SIDEKICK = "sidekick"

    @property
    def layout(self) -> SourceLayout:
        return LAYOUTS[self]

    @property
    def display_name(self) -> str:
        return self.layout.display_name

    @property
    def tree_format(self) -> TreeFormat:
        return self.layout.tree_format

    @property
    def history_schema(self) -> HistorySchema:
        return self.layout.history_schema

    @property
    def is_chromium_like(self) -> bool:
        return self.layout.history_schema is HistorySchema.CHROMIUM_SQL


@dataclass(frozen=True)
class SourceLayout:
    """Where a source keeps its stores, relative to the home directory.

    For profile-based sources both paths point at the profiles directory and
    the database is located by scanning one level of subdirectories.
    """

    display_name: str
    tree_format: TreeFormat
    history_schema: HistorySchema
    history: Path
    bookmarks: Path
    profile_based: bool = False


def _chromium(name: str, base: Path) -> SourceLayout:
    return SourceLayout(
        display_name=name,
        tree_format=TreeFormat.CHROMIUM_JSON,
        history_schema=HistorySchema.CHROMIUM_SQL,
        history=base / "History",
        bookmarks=base / "Bookmarks",
    )


def _mozilla(name: str, profiles: Path) -> SourceLayout:
    return SourceLayout(
        display_name=name,
        tree_format=TreeFormat.MOZILLA_SQL,
        history_schema=HistorySchema.MOZILLA_SQL,
        history=profiles,
        bookmarks=profiles,
        profile_based=True,
    )


LAYOUTS: dict[Source, SourceLayout] = {
    Source.CHROME: _chromium("Google Chrome", APP_SUPPORT / "Google" / "Chrome" / "Default"),
    Source.CHROME_BETA: _chromium(
        "Google Chrome Beta", APP_SUPPORT / "Google" / "ChromeBeta" / "Default"
    ),
    Source.BRAVE: _chromium(
        "Brave", APP_SUPPORT / "BraveSoftware" / "Brave-Browser" / "Default"
    ),
    Source.BRAVE_BETA: _chromium(
        "Brave Beta", APP_SUPPORT / "BraveSoftware" / "Brave-Browser-Beta" / "Default"
    ),
    Source.SAFARI: SourceLayout(
        display_name="Safari",
        tree_format=TreeFormat.WEBKIT_PLIST,
        history_schema=HistorySchema.WEBKIT_SQL,
        history=Path("Library") / "Safari" / "History.db",
        bookmarks=Path("Library") / "Safari" / "Bookmarks.plist",
    ),
    Source.FIREFOX: _mozilla("Firefox", APP_SUPPORT / "Firefox" / "Profiles"),
    Source.ZEN: _mozilla("Zen", APP_SUPPORT / "zen" / "Profiles"),
    Source.EDGE: _chromium("Microsoft Edge", APP_SUPPORT / "Microsoft Edge" / "Default"),
    # Opera keeps its profile directly in the application directory.
    Source.OPERA: _chromium("Opera", APP_SUPPORT / "com.operasoftware.Opera"),
    Source.VIVALDI: _chromium("Vivaldi", APP_SUPPORT / "Vivaldi" / "Default"),
    Source.ARC: _chromium("Arc", APP_SUPPORT / "Arc" / "User Data" / "Default"),
    Source.CHROMIUM: _chromium("Chromium", APP_SUPPORT / "Chromium" / "Default"),
    Source.SIDEKICK: _chromium("Sidekick", APP_SUPPORT / "Sidekick" / "Default"),
}


@dataclass(frozen=True)
class SourcePaths:
    """Resolved store locations for one source; either may be missing."""

    history: Path | None = None
    bookmarks: Path | None = None


def discover(config: SearchConfig, home: Path | None = None) -> dict[Source, SourcePaths]:
    """Resolve store paths for every enabled source.

    Disabled sources are omitted. A path that does not exist (or cannot be
    inspected) resolves to None; nothing here raises.
    """
    home = home or Path.home()
    found: dict[Source, SourcePaths] = {}

    for source in Source:
        if source not in config.enabled_sources:
            continue

        layout = source.layout
        history = home / layout.history
        bookmarks = home / layout.bookmarks

        if layout.profile_based:
            db = _find_profile_db(history, MOZILLA_DB_NAME)
            history = bookmarks = db

        paths = SourcePaths(
            history=_existing(history),
            bookmarks=_existing(bookmarks),
        )
        if paths.history is None and paths.bookmarks is None:
            logger.info("No %s data found under %s", source.display_name, home)
        found[source] = paths

    return found


def _find_profile_db(profiles_dir: Path, filename: str) -> Path | None:
    """Return the first profile's database; only one profile is supported."""
    try:
        children = sorted(profiles_dir.iterdir())
    except OSError:
        return None

    for child in children:
        try:
            if not child.is_dir():
                continue
            db = child / filename
            if db.is_file():
                return db
        except OSError:
            continue
    return None


def _existing(path: Path | None) -> Path | None:
    if path is None:
        return None
    try:
        return path if path.exists() else None
    except OSError:
        return None
