"""Invocation-wide configuration, read once from the launcher's environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from browser_search.exceptions import ConfigParseError
from browser_search.registry import Source

DEFAULT_DATE_FORMAT = "%d.%m.%Y"
DEFAULT_MAX_RESULTS = 30
DEFAULT_MAX_WORKERS = 8
# Freshness is measured in whole hours since the last visit.
DEFAULT_FRESHNESS_UNIT_SECONDS = 3600
# Relative to the home directory (macOS per-user caches).
DEFAULT_CACHE_DIR = Path("Library") / "Caches" / "browser-search"


@dataclass(frozen=True)
class SearchConfig:
    """Everything a search invocation needs to know about its environment."""

    enabled_sources: frozenset[Source] = field(default_factory=frozenset)
    ignored_domains: tuple[str, ...] = ()
    date_format: str = DEFAULT_DATE_FORMAT
    max_results: int = DEFAULT_MAX_RESULTS
    show_favicon: bool = False
    snapshot_dir: Path | None = None
    cache_dir: Path | None = None
    max_workers: int = DEFAULT_MAX_WORKERS
    freshness_unit_seconds: int = DEFAULT_FRESHNESS_UNIT_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SearchConfig:
        """Build a config from launcher variables.

        An unset `cache_dir` falls back to `~/Library/Caches/browser-search`.

        Raises:
            ConfigParseError: a numeric option is not a positive integer.
        """
        env = os.environ if environ is None else environ

        return cls(
            enabled_sources=frozenset(
                source for source in Source if _env_bool(env, source.value)
            ),
            ignored_domains=_env_list(env, "ignored_domains"),
            date_format=env.get("date_format") or DEFAULT_DATE_FORMAT,
            max_results=_env_int(env, "max_results", DEFAULT_MAX_RESULTS),
            show_favicon=_env_bool(env, "show_favicon"),
            snapshot_dir=_env_path(env, "snapshot_dir"),
            cache_dir=_env_path(env, "cache_dir") or Path.home() / DEFAULT_CACHE_DIR,
            max_workers=_env_int(env, "max_workers", DEFAULT_MAX_WORKERS),
            freshness_unit_seconds=_env_int(
                env, "freshness_unit_seconds", DEFAULT_FRESHNESS_UNIT_SECONDS
            ),
        )


def _env_bool(env: Mapping[str, str], name: str) -> bool:
    """"1" or "true" (any case) is true; anything else, including unset, is false."""
    value = env.get(name, "").strip()
    return value == "1" or value.lower() == "true"


def _env_list(env: Mapping[str, str], name: str) -> tuple[str, ...]:
    raw = env.get(name, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigParseError(f"{name} must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ConfigParseError(f"{name} must be positive, got {value}")
    return value


def _env_path(env: Mapping[str, str], name: str) -> Path | None:
    raw = env.get(name, "").strip()
    return Path(raw).expanduser() if raw else None
