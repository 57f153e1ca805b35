"""Search pipeline: discover sources, extract in parallel, merge, rank, limit."""

from __future__ import annotations

import concurrent.futures
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from browser_search.aggregate import merge
from browser_search.cache import RecordCache, ResultCache
from browser_search.config import SearchConfig
from browser_search.exceptions import BrowserSearchError, CacheUnavailable, SourceUnavailable
from browser_search.extractors import (
    extract_chromium_bookmarks,
    extract_chromium_history,
    extract_mozilla_bookmarks,
    extract_mozilla_history,
    extract_webkit_bookmarks,
    extract_webkit_history,
)
from browser_search.extractors.parser import is_ignored
from browser_search.favicons import FaviconFetcher
from browser_search.models import CanonicalRecord, Origin
from browser_search.query import filter_records, normalize_query
from browser_search.ranking import rank, take
from browser_search.registry import HistorySchema, Source, TreeFormat, discover
from browser_search.snapshot import snapshot

logger = logging.getLogger(__name__)

HISTORY_CACHE_KEY = "history"
# Most recent history records kept in the warm-start cache.
HISTORY_CACHE_LIMIT = 5000


@dataclass(frozen=True)
class _Job:
    """One store of one source: the unit of parallel work."""

    source: Source
    origin: Origin
    path: Path

    @property
    def label(self) -> str:
        return f"{self.source.value}:{self.origin.value}"

    @property
    def snapshot_prefix(self) -> str:
        return f"{self.source.value}-{self.origin.value}-"


class BrowserSearch:
    """Search bookmarks and history across every enabled browser.

    Args:
        config: Invocation configuration.
        cache: Warm-start cache; defaults to a ResultCache in `config.cache_dir`.
        favicons: Favicon decorator; defaults to one under `config.cache_dir`.
        home: Home directory to resolve browser stores against.
    """

    def __init__(
        self,
        config: SearchConfig,
        cache: RecordCache | None = None,
        favicons: FaviconFetcher | None = None,
        home: Path | None = None,
    ):
        self.config = config
        self.home = home
        if cache is None and config.cache_dir is not None:
            cache = ResultCache(config.cache_dir)
        self.cache = cache
        if favicons is None and config.cache_dir is not None:
            favicons = FaviconFetcher(config.cache_dir / "favicons")
        self.favicons = favicons
        self.last_errors: dict[str, str] = {}

    def search(
        self,
        query: str,
        include_bookmarks: bool = True,
        include_history: bool = True,
        now: datetime | None = None,
    ) -> list[CanonicalRecord]:
        """Ranked, deduplicated records matching `query`.

        A source that fails contributes nothing; the failure is logged and
        kept in `last_errors`. A store that vanished after discovery is
        skipped without an error.
        """
        started = time.perf_counter()
        now = now or datetime.now(timezone.utc)
        query = normalize_query(query)
        self.last_errors = {}

        jobs = self._jobs(include_bookmarks, include_history)
        extracted = self._run_jobs(jobs, query)
        batches = [batch or [] for batch in extracted]

        if self.cache is not None:
            batches.append(self._sync_history_cache(jobs, extracted, query))

        ranked = rank(
            merge(batches),
            query,
            now=now,
            unit_seconds=self.config.freshness_unit_seconds,
        )
        results = take(ranked, self.config.max_results)

        if self.config.show_favicon and self.favicons is not None:
            results = self.favicons.decorate(results)

        logger.debug(
            "Search %r over %d stores: %d results in %.3fs",
            query, len(jobs), len(results), time.perf_counter() - started,
        )
        return results

    def _jobs(self, include_bookmarks: bool, include_history: bool) -> list[_Job]:
        jobs = []
        for source, paths in discover(self.config, home=self.home).items():
            if include_bookmarks and paths.bookmarks is not None:
                jobs.append(_Job(source, Origin.BOOKMARK, paths.bookmarks))
            if include_history and paths.history is not None:
                jobs.append(_Job(source, Origin.HISTORY, paths.history))
        return jobs

    def _run_jobs(
        self,
        jobs: list[_Job],
        query: str,
    ) -> list[list[CanonicalRecord] | None]:
        """Extract every job in parallel; results come back in job order.

        A job that did not produce a batch leaves None in its slot.
        """
        results: list[list[CanonicalRecord] | None] = [None for _ in jobs]
        if not jobs:
            return results

        workers = min(self.config.max_workers, len(jobs))
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._extract, job, query): index
                for index, job in enumerate(jobs)
            }
            for future in concurrent.futures.as_completed(futures):
                index = futures[future]
                job = jobs[index]
                try:
                    results[index] = future.result()
                except SourceUnavailable as e:
                    logger.info("Skipping %s %s: %s", job.source.display_name, job.origin.value, e)
                except BrowserSearchError as e:
                    self.last_errors[job.label] = str(e)
                    logger.warning(
                        "%s %s search failed: %s",
                        job.source.display_name, job.origin.value, e,
                    )
        return results

    def _extract(self, job: _Job, query: str) -> list[CanonicalRecord]:
        if job.origin is Origin.BOOKMARK:
            tree_format = job.source.tree_format
            if tree_format is TreeFormat.CHROMIUM_JSON:
                return extract_chromium_bookmarks(job.path, query)
            if tree_format is TreeFormat.WEBKIT_PLIST:
                return extract_webkit_bookmarks(job.path, query)
            with self._snapshot(job) as conn:
                return extract_mozilla_bookmarks(conn, query)

        schema = job.source.history_schema
        with self._snapshot(job) as conn:
            if schema is HistorySchema.CHROMIUM_SQL:
                return extract_chromium_history(
                    conn, query, self.config.date_format, self.config.ignored_domains
                )
            if schema is HistorySchema.WEBKIT_SQL:
                return extract_webkit_history(conn, query, self.config.date_format)
            return extract_mozilla_history(conn, query, self.config.date_format)

    def _snapshot(self, job: _Job):
        return snapshot(
            job.path,
            reuse_dir=self.config.snapshot_dir,
            reuse_prefix=job.snapshot_prefix,
        )

    def _sync_history_cache(
        self,
        jobs: list[_Job],
        results: list[list[CanonicalRecord] | None],
        query: str,
    ) -> list[CanonicalRecord]:
        """Cached history for this run's history stores, minus fresh URLs.

        Only sources with a history job this run are read, so a disabled
        source never resurfaces from the cache. Each successful job's fresh
        batch is folded into its source's entry.
        """
        fresh_urls = {record.url for batch in results if batch for record in batch}
        warm: list[CanonicalRecord] = []
        for job, batch in zip(jobs, results):
            if job.origin is not Origin.HISTORY:
                continue
            cached = self._cached_history(job.source)
            warm.extend(
                record for record in filter_records(cached, query)
                if record.url not in fresh_urls
            )
            if batch is not None:
                self._store_history(job.source, cached, batch)
        return warm

    def _cached_history(self, source: Source) -> list[CanonicalRecord]:
        try:
            cached = self.cache.get(history_cache_key(source)) or []
        except CacheUnavailable as e:
            logger.warning("%s history cache unavailable: %s", source.display_name, e)
            return []
        if source.is_chromium_like and self.config.ignored_domains:
            cached = [
                record for record in cached
                if not is_ignored(record.url, self.config.ignored_domains)
            ]
        return cached

    def _store_history(
        self,
        source: Source,
        previous: list[CanonicalRecord],
        fresh: list[CanonicalRecord],
    ) -> None:
        if not fresh:
            return
        by_url = {record.url: record for record in previous}
        by_url.update((record.url, record) for record in fresh)
        newest = sorted(
            by_url.values(),
            key=lambda r: (r.last_visit or datetime.min.replace(tzinfo=timezone.utc), r.url),
            reverse=True,
        )[:HISTORY_CACHE_LIMIT]

        try:
            self.cache.put(history_cache_key(source), newest)
        except CacheUnavailable as e:
            logger.warning("Could not update %s history cache: %s", source.display_name, e)


def history_cache_key(source: Source) -> str:
    return f"{HISTORY_CACHE_KEY}-{source.value}"
