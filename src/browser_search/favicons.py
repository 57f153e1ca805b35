"""Best-effort favicon decoration of ranked results."""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import replace
from pathlib import Path
from urllib.parse import urlparse

import httpx

from browser_search.models import CanonicalRecord

logger = logging.getLogger(__name__)

FAVICON_URL = "https://www.google.com/s2/favicons"
FAVICON_SIZE = 128
USER_AGENT = "Mozilla/5.0"
MAX_WORKERS = 8


def get_domain(url: str) -> str | None:
    """Host part of a URL, or None for URLs without one (e.g. `file:`)."""
    try:
        return urlparse(url).hostname or None
    except ValueError:
        return None


class FaviconFetcher:
    """Attach cached favicon paths to records, downloading missing icons.

    Args:
        cache_dir: Where `<domain>.png` files are kept.
        client: Optional preconfigured httpx client (tests pass a mock transport).
    """

    def __init__(self, cache_dir: Path, client: httpx.Client | None = None):
        self.cache_dir = cache_dir
        self._client = client

    def decorate(self, records: list[CanonicalRecord]) -> list[CanonicalRecord]:
        """Same records, same order; `favicon` set wherever an icon is available."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Favicon cache unavailable at %s: %s", self.cache_dir, e)
            return list(records)

        domains = {d for d in (get_domain(r.url) for r in records) if d}
        missing = sorted(d for d in domains if not self._icon_path(d).exists())

        if missing:
            client = self._client or httpx.Client(
                timeout=5.0,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            )
            try:
                with concurrent.futures.ThreadPoolExecutor(
                    max_workers=min(MAX_WORKERS, len(missing))
                ) as executor:
                    list(executor.map(lambda d: self._download(client, d), missing))
            finally:
                if self._client is None:
                    client.close()

        decorated = []
        for record in records:
            domain = get_domain(record.url)
            icon = self._icon_path(domain) if domain else None
            if icon is not None and icon.exists():
                record = replace(record, favicon=str(icon))
            decorated.append(record)
        return decorated

    def _icon_path(self, domain: str) -> Path:
        return self.cache_dir / f"{domain}.png"

    def _download(self, client: httpx.Client, domain: str) -> bool:
        try:
            response = client.get(
                FAVICON_URL, params={"domain": domain, "sz": FAVICON_SIZE}
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug("Favicon fetch failed for %s: %s", domain, e)
            return False

        if not response.content:
            return False
        try:
            self._icon_path(domain).write_bytes(response.content)
        except OSError as e:
            logger.debug("Cannot store favicon for %s: %s", domain, e)
            return False
        return True
