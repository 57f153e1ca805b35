"""Script Filter JSON for launcher integration."""

from __future__ import annotations

import json

from browser_search.models import CanonicalRecord


def to_item(record: CanonicalRecord, show_favicon: bool = False) -> dict:
    item: dict = {
        "uid": record.url,
        "title": record.title,
        "subtitle": record.subtitle,
        "arg": record.url,
        "valid": True,
        "mods": {
            "alt": {"valid": True, "arg": record.url, "subtitle": record.url},
            "cmd": {"valid": True, "arg": record.url, "subtitle": "Other Actions..."},
        },
    }
    if show_favicon and record.favicon:
        item["icon"] = {"type": "fileicon", "path": record.favicon}
    return item


def render(records: list[CanonicalRecord], show_favicon: bool = False) -> str:
    return json.dumps(
        {"items": [to_item(r, show_favicon) for r in records]},
        ensure_ascii=False,
    )
