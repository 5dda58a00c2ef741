# tests/conftest.py
from __future__ import annotations

import threading

import pytest

from clipcache.core.fetch.cache import FetchCache
from clipcache.core.media.page_extractor import PageExtractor
from tests.utils import FakeFetch, WaitCountingCache, make_policy


@pytest.fixture
def policy():
    return make_policy()


@pytest.fixture
def fake_fetch():
    """
    Callable factory for FakeFetch transports.

    Usage:
        fetch = fake_fetch({"https://x/a.mp3": (200, b"...")})
        fetch = fake_fetch(routes, gated=True)   # calls block until fetch.gate.set()
    """

    def _factory(routes=None, *, gated: bool = False) -> FakeFetch:
        return FakeFetch(routes, gate=threading.Event() if gated else None)

    return _factory


@pytest.fixture
def cache_factory(policy):
    def _factory(fetch: FakeFetch, *, counting: bool = False) -> FetchCache:
        cls = WaitCountingCache if counting else FetchCache
        return cls(policy, fetch=fetch)

    return _factory


@pytest.fixture
def extractor_factory(policy):
    def _factory(fetch: FakeFetch) -> PageExtractor:
        return PageExtractor(policy, fetch=fetch)

    return _factory


# -------- Pytest markers --------
def pytest_configure(config):
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
