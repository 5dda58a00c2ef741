# clipcache/core/fetch/prefetch.py
"""
Background pre-caching.

Work is submitted to a thread pool as ordinary `FetchCache.fetch` calls, so a
pre-cache run and a foreground request for the same URL share one download
through the cache's in-flight dedup.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_all

from clipcache.core.fetch.cache import FetchCache
from clipcache.core.fetch.errors import ClipCacheError
from clipcache.schemas.models import EncodedPayload, PrefetchReport

logger = logging.getLogger(__name__)


class Prefetcher:
    """Submit fire-and-forget downloads into a FetchCache."""

    def __init__(self, cache: FetchCache, *, max_workers: int | None = None) -> None:
        self.cache = cache
        workers = max_workers or cache.policy.max_workers
        self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="clipcache-prefetch")

    def submit(self, url: str) -> Future[EncodedPayload]:
        """Schedule one download; the future carries the payload or the DownloadError."""
        fut = self._pool.submit(self.cache.fetch, url)
        fut.add_done_callback(lambda f, u=url: self._log_outcome(u, f))
        return fut

    def precache_all(self, urls: Iterable[str], *, timeout: float | None = None) -> PrefetchReport:
        """
        Download every URL not already cached and wait for the batch.

        Failures are collected into the report, never raised.
        """
        futures: dict[str, Future[EncodedPayload]] = {}
        skipped: list[str] = []
        for url in dict.fromkeys(urls):
            if self.cache.contains(url):
                skipped.append(url)
                continue
            futures[url] = self.submit(url)

        wait_all(futures.values(), timeout=timeout)

        cached: list[str] = []
        failed: dict[str, str] = {}
        for url, fut in futures.items():
            if not fut.done():
                failed[url] = "still downloading"
                continue
            exc = fut.exception()
            if exc is None:
                cached.append(url)
            else:
                failed[url] = str(exc)
        return PrefetchReport(cached=cached, skipped=skipped, failed=failed)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> Prefetcher:
        return self

    def __exit__(self, *exc: object) -> None:
        self.shutdown(wait=True)

    @staticmethod
    def _log_outcome(url: str, fut: Future[EncodedPayload]) -> None:
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is None:
            logger.debug("Pre-cached %s", url)
        elif isinstance(exc, ClipCacheError):
            logger.warning("Could not pre-cache %s: %s", url, exc)
        else:
            logger.error("Unexpected error pre-caching %s: %r", url, exc)


__all__ = ["Prefetcher"]
