"""Bookmark extraction from tree-shaped stores (Chromium JSON, Safari plist).

Both formats are walked by one traversal over a small node interface. The
walk uses an explicit stack: bookmark trees are user-built and can nest far
deeper than the interpreter's recursion limit.
"""

from __future__ import annotations

import logging
import plistlib
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Protocol
from xml.parsers.expat import ExpatError

import ijson
from ijson.common import ObjectBuilder

from browser_search.exceptions import ExtractionFailed, SourceUnavailable
from browser_search.extractors.parser import parse_bookmark
from browser_search.models import CanonicalRecord
from browser_search.query import filter_records

logger = logging.getLogger(__name__)


class TreeNode(Protocol):
    def bookmark(self) -> tuple[str, str] | None:
        """(title, url) when this node is a bookmark leaf."""
        ...

    def children(self) -> Iterable[TreeNode]:
        ...


class ChromiumNode:
    """A value inside a Chromium `Bookmarks` JSON document.

    Bookmarks are objects with string `name` and `url` and `type == "url"`.
    Every nested object or array is walked, `children` included.
    """

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def bookmark(self) -> tuple[str, str] | None:
        value = self.value
        if not isinstance(value, dict) or value.get("type") != "url":
            return None
        name, url = value.get("name"), value.get("url")
        if isinstance(name, str) and isinstance(url, str):
            return name, url
        return None

    def children(self) -> Iterable[ChromiumNode]:
        return [ChromiumNode(v) for v in _containers(self.value)]


class WebKitNode:
    """A value inside Safari's `Bookmarks.plist`.

    Bookmarks are dicts with a `URLString` and a `URIDictionary` holding the
    `title`.
    """

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def bookmark(self) -> tuple[str, str] | None:
        value = self.value
        if not isinstance(value, dict):
            return None
        url, uri_dict = value.get("URLString"), value.get("URIDictionary")
        if not isinstance(url, str) or not isinstance(uri_dict, dict):
            return None
        title = uri_dict.get("title")
        if isinstance(title, str):
            return title, url
        return None

    def children(self) -> Iterable[WebKitNode]:
        return [WebKitNode(v) for v in _containers(self.value)]


def _containers(value: Any) -> list:
    if isinstance(value, dict):
        items = value.values()
    elif isinstance(value, list):
        items = value
    else:
        return []
    return [v for v in items if isinstance(v, (dict, list))]


def walk_bookmarks(root: TreeNode) -> Iterator[tuple[str, str]]:
    """Depth-first (title, url) pairs in document order."""
    stack: list[TreeNode] = [root]
    while stack:
        node = stack.pop()
        found = node.bookmark()
        if found is not None:
            yield found
        stack.extend(reversed(list(node.children())))


def records_from_tree(root: TreeNode) -> list[CanonicalRecord]:
    records = []
    for title, url in walk_bookmarks(root):
        record = parse_bookmark(title, url)
        if record is not None:
            records.append(record)
    return records


def _load_json(path: Path) -> Any:
    # Event stream plus ObjectBuilder: nesting depth is bounded by memory,
    # not by the C stack that json.load recurses on.
    builder = ObjectBuilder()
    with open(path, "rb") as f:
        for event, value in ijson.basic_parse(f, use_float=True):
            builder.event(event, value)
    return builder.value


def extract_chromium_bookmarks(path: Path, query: str) -> list[CanonicalRecord]:
    """Matching bookmarks from a Chromium-family `Bookmarks` file.

    Raises:
        SourceUnavailable: the file vanished after discovery.
        ExtractionFailed: the file cannot be read or is not valid JSON.
    """
    try:
        data = _load_json(path)
    except FileNotFoundError as e:
        raise SourceUnavailable(f"Chromium bookmarks {path} disappeared") from e
    except (OSError, ValueError, ijson.JSONError) as e:
        raise ExtractionFailed(f"Cannot parse Chromium bookmarks {path}: {e}") from e

    roots = data.get("roots") if isinstance(data, dict) else None
    if roots is None:
        logger.debug("No bookmark roots in %s", path)
        return []
    return filter_records(records_from_tree(ChromiumNode(roots)), query)


def extract_webkit_bookmarks(path: Path, query: str) -> list[CanonicalRecord]:
    """Matching bookmarks from Safari's `Bookmarks.plist` (binary or XML).

    Raises:
        SourceUnavailable: the file vanished after discovery.
        ExtractionFailed: the file cannot be read or is not a valid plist.
    """
    try:
        with open(path, "rb") as f:
            data = plistlib.load(f)
    except FileNotFoundError as e:
        raise SourceUnavailable(f"Safari bookmarks {path} disappeared") from e
    except (OSError, ValueError, ExpatError, RecursionError) as e:
        raise ExtractionFailed(f"Cannot parse Safari bookmarks {path}: {e}") from e

    return filter_records(records_from_tree(WebKitNode(data)), query)
