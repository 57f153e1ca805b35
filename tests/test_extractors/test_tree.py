"""Tests for tree-shaped bookmark stores."""

import json
import plistlib

import pytest

from browser_search.exceptions import ExtractionFailed, SourceUnavailable
from browser_search.extractors.tree import (
    ChromiumNode,
    WebKitNode,
    extract_chromium_bookmarks,
    extract_webkit_bookmarks,
    walk_bookmarks,
)


def _chrome_url(name, url):
    return {"type": "url", "name": name, "url": url}


def _chrome_folder(name, children):
    return {"type": "folder", "name": name, "children": children}


CHROME_BOOKMARKS = {
    "version": 1,
    "roots": {
        "bookmark_bar": _chrome_folder("Bookmarks bar", [
            _chrome_url("Python", "https://python.org"),
            _chrome_folder("Dev", [
                _chrome_url("PyPI", "https://pypi.org"),
                _chrome_folder("Empty", []),
            ]),
        ]),
        "other": _chrome_folder("Other", [
            _chrome_url("Example", "https://example.com"),
            {"type": "folder", "name": "no url", "url": 5},
        ]),
    },
}


@pytest.fixture
def chrome_file(tmp_path):
    path = tmp_path / "Bookmarks"
    path.write_text(json.dumps(CHROME_BOOKMARKS), encoding="utf-8")
    return path


@pytest.fixture
def safari_file(tmp_path):
    data = {
        "Title": "",
        "Children": [
            {"Title": "BookmarksBar", "Children": [
                {"URLString": "https://webkit.org", "URIDictionary": {"title": "WebKit"}},
                {"Title": "Nested", "Children": [
                    {"URLString": "https://apple.com", "URIDictionary": {"title": "Apple"}},
                ]},
            ]},
            {"URLString": "https://notitle.org", "URIDictionary": {}},
        ],
    }
    path = tmp_path / "Bookmarks.plist"
    with open(path, "wb") as f:
        plistlib.dump(data, f, fmt=plistlib.FMT_BINARY)
    return path


def test_walk_is_depth_first_in_document_order():
    found = list(walk_bookmarks(ChromiumNode(CHROME_BOOKMARKS["roots"])))
    assert found == [
        ("Python", "https://python.org"),
        ("PyPI", "https://pypi.org"),
        ("Example", "https://example.com"),
    ]


def test_walk_is_stable():
    root = ChromiumNode(CHROME_BOOKMARKS["roots"])
    assert list(walk_bookmarks(root)) == list(walk_bookmarks(root))


def test_walk_deeply_nested_tree():
    node = _chrome_url("Deep", "https://deep.example")
    for i in range(10_000):
        node = _chrome_folder(f"level {i}", [node])
    assert list(walk_bookmarks(ChromiumNode(node))) == [("Deep", "https://deep.example")]


def test_walk_deeply_nested_plist_tree():
    node = {"URLString": "https://deep.example", "URIDictionary": {"title": "Deep"}}
    for _ in range(10_000):
        node = {"Children": [node]}
    assert list(walk_bookmarks(WebKitNode(node))) == [("Deep", "https://deep.example")]


def test_extract_chromium_bookmarks(chrome_file):
    records = extract_chromium_bookmarks(chrome_file, "")
    assert [r.title for r in records] == ["Python", "PyPI", "Example"]
    assert all(r.is_bookmark for r in records)


def test_extract_chromium_bookmarks_filters_by_query(chrome_file):
    records = extract_chromium_bookmarks(chrome_file, "pypi")
    assert [r.url for r in records] == ["https://pypi.org"]


def test_extract_chromium_invalid_json(tmp_path):
    path = tmp_path / "Bookmarks"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ExtractionFailed):
        extract_chromium_bookmarks(path, "")


def test_extract_chromium_without_roots(tmp_path):
    path = tmp_path / "Bookmarks"
    path.write_text("[]", encoding="utf-8")
    assert extract_chromium_bookmarks(path, "") == []


def test_extract_webkit_bookmarks(safari_file):
    records = extract_webkit_bookmarks(safari_file, "")
    assert [(r.title, r.url) for r in records] == [
        ("WebKit", "https://webkit.org"),
        ("Apple", "https://apple.com"),
    ]


def test_extract_webkit_bookmarks_or_query(safari_file):
    records = extract_webkit_bookmarks(safari_file, "nothing|apple")
    assert [r.title for r in records] == ["Apple"]


def test_extract_webkit_invalid_plist(tmp_path):
    path = tmp_path / "Bookmarks.plist"
    path.write_bytes(b"garbage")
    with pytest.raises(ExtractionFailed):
        extract_webkit_bookmarks(path, "")


def test_extract_chromium_deeply_nested_file(tmp_path):
    leaf = json.dumps(_chrome_url("Deep", "https://deep.example"))
    folder_open = '{"type": "folder", "name": "nested", "children": ['
    nested = folder_open * 10_000 + leaf + "]}" * 10_000
    path = tmp_path / "Bookmarks"
    path.write_text('{"roots": {"bookmark_bar": ' + nested + "}}", encoding="utf-8")

    records = extract_chromium_bookmarks(path, "deep")
    assert [(r.title, r.url) for r in records] == [("Deep", "https://deep.example")]


def test_extract_missing_file_is_unavailable(tmp_path):
    with pytest.raises(SourceUnavailable):
        extract_chromium_bookmarks(tmp_path / "Bookmarks", "")
    with pytest.raises(SourceUnavailable):
        extract_webkit_bookmarks(tmp_path / "Bookmarks.plist", "")
