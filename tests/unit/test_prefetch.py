# tests/unit/test_prefetch.py
from __future__ import annotations

import requests

from clipcache.core.fetch.errors import DownloadError
from clipcache.core.fetch.prefetch import Prefetcher
from tests.utils import CLIP_BYTES, CLIP_URL

BAD_URL = "https://x.example/missing.mp3"
OGG_URL = "https://x.example/b.ogg"


def test_precache_all_reports_each_url(fake_fetch, cache_factory) -> None:
    fetch = fake_fetch({CLIP_URL: (200, CLIP_BYTES), OGG_URL: (200, b"OggS"), BAD_URL: (404, b"")})
    cache = cache_factory(fetch)
    cache.fetch(OGG_URL)

    with Prefetcher(cache, max_workers=2) as pf:
        report = pf.precache_all([CLIP_URL, OGG_URL, BAD_URL, CLIP_URL])

    assert report.cached == [CLIP_URL]
    assert report.skipped == [OGG_URL]
    assert list(report.failed) == [BAD_URL]
    assert "404" in report.failed[BAD_URL]
    assert report.ok is False
    assert fetch.count(CLIP_URL) == 1
    assert fetch.count(OGG_URL) == 1


def test_background_submit_joins_foreground_fetch(fake_fetch, cache_factory) -> None:
    fetch = fake_fetch({CLIP_URL: (200, CLIP_BYTES)}, gated=True)
    cache = cache_factory(fetch)

    with Prefetcher(cache, max_workers=1) as pf:
        fut = pf.submit(CLIP_URL)
        assert fetch.started.wait(5.0)
        foreground = pf.submit(CLIP_URL)  # queued behind the first on a 1-worker pool
        fetch.gate.set()
        assert fut.result(timeout=5.0) is foreground.result(timeout=5.0)

    assert fetch.count(CLIP_URL) == 1


def test_submit_failure_lands_in_future(fake_fetch, cache_factory) -> None:
    fetch = fake_fetch({CLIP_URL: requests.ConnectionError("nope")})
    cache = cache_factory(fetch)

    with Prefetcher(cache) as pf:
        exc = pf.submit(CLIP_URL).exception(timeout=5.0)

    assert isinstance(exc, DownloadError)
    assert not cache.contains(CLIP_URL)


def test_default_worker_count_comes_from_policy(fake_fetch, cache_factory) -> None:
    cache = cache_factory(fake_fetch())
    pf = Prefetcher(cache)
    try:
        assert pf._pool._max_workers == cache.policy.max_workers
    finally:
        pf.shutdown()
