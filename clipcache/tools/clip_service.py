# clipcache/tools/clip_service.py
"""
Clip service: reference → resolved URL → cached payload.

This is the single integration point for the command layer and the CLI:
  1) resolve(reference)      → direct audio URL (page extraction when needed)
  2) FetchCache.fetch(url)   → encoded payload, downloaded at most once per URL
  3) precache / probe / forget / cache_info for catalog maintenance commands

The service keeps no catalog of its own; callers pass raw URLs and references.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from concurrent.futures import Future

from clipcache.core.fetch.cache import FetchCache
from clipcache.core.fetch.http import FetchFn
from clipcache.core.fetch.prefetch import Prefetcher
from clipcache.core.media.page_extractor import PageExtractor
from clipcache.core.media.resolver import resolve
from clipcache.schemas.models import CacheStats, EncodedPayload, FetchPolicy, PrefetchReport


class ClipService:
    def __init__(
        self,
        policy: FetchPolicy | None = None,
        *,
        fetch: FetchFn | None = None,
        cache: FetchCache | None = None,
    ) -> None:
        self.policy = policy or FetchPolicy()
        self.cache = cache or FetchCache(self.policy, fetch=fetch)
        self.extractor = PageExtractor(self.policy, fetch=fetch)
        self._prefetcher: Prefetcher | None = None
        self._prefetcher_lock = threading.Lock()

    @property
    def prefetcher(self) -> Prefetcher:
        with self._prefetcher_lock:
            if self._prefetcher is None:
                self._prefetcher = Prefetcher(self.cache)
            return self._prefetcher

    def resolve(self, reference: str | None) -> str:
        return resolve(reference, policy=self.policy, extractor=self.extractor)

    def play(self, reference: str | None, *, timeout: float | None = None) -> EncodedPayload:
        """Resolve `reference` and return its payload (downloading only on a cache miss)."""
        url = self.resolve(reference)
        return self.cache.fetch(url, timeout=timeout)

    def probe(self, reference: str | None) -> str:
        """
        Check that a reference resolves and downloads before it is catalogued.

        The probe goes through the cache, so a successful probe leaves the clip cached.
        Returns the resolved URL.
        """
        url = self.resolve(reference)
        self.cache.fetch(url)
        return url

    def precache(self, urls: Iterable[str], *, timeout: float | None = None) -> PrefetchReport:
        return self.prefetcher.precache_all(urls, timeout=timeout)

    def precache_in_background(self, url: str) -> Future[EncodedPayload]:
        return self.prefetcher.submit(url)

    def forget(self, url: str) -> bool:
        return self.cache.evict(url)

    def clear(self) -> None:
        self.cache.clear()

    def cache_info(self) -> CacheStats:
        return self.cache.stats()

    def close(self) -> None:
        with self._prefetcher_lock:
            pf, self._prefetcher = self._prefetcher, None
        if pf is not None:
            pf.shutdown(wait=True)

    def __enter__(self) -> ClipService:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = ["ClipService"]
