# tests/utils.py
"""
Single source of truth for test data, fakes, and canonical pages.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence

from clipcache.core.fetch.cache import FetchCache
from clipcache.schemas.models import EncodedPayload, FetchPolicy

# -----------------------------
# Global defaults (edit once)
# -----------------------------

SITE = "https://www.myinstants.com"
PAGE_URL = f"{SITE}/en/instant/dexter-meme/"
CLIP_URL = "https://x.example/clip.mp3"
CLIP_BYTES = b"ID3\x03\x00fake-mp3-frames"

# Canonical sharing page: preload variable wins over every other hint
SHARING_PAGE_HTML = """<!doctype html>
<html>
<head>
  <script>
    var preloadAudioUrl = '/media/sounds/dexter-meme.mp3';
  </script>
</head>
<body>
  <audio src="/media/sounds/wrong-audio-tag.mp3"></audio>
  <a href="/media/sounds/wrong-link.mp3" download>Download MP3</a>
</body>
</html>
"""

Route = tuple[int, bytes] | BaseException


def make_policy(**overrides) -> FetchPolicy:
    base = {"timeout_s": 2.0, "user_agent": "TestAgent/1.0"}
    base.update(overrides)
    return FetchPolicy(**base)


class FakeFetch:
    """
    Stand-in for `http_get(url, policy)`.

    routes maps URL -> (status, body) | exception | list of those (consumed one per call,
    last one repeats). Unknown URLs answer 404. When `gate` is given every call blocks
    on it, which lets tests hold a download open while other callers pile up.
    """

    def __init__(self, routes: dict[str, Route | Sequence[Route]] | None = None, *, gate: threading.Event | None = None):
        self.routes: dict[str, list[Route]] = {}
        for url, r in (routes or {}).items():
            self.routes[url] = list(r) if isinstance(r, list) else [r]  # type: ignore[list-item]
        self.gate = gate
        self.calls: list[str] = []
        self.policies: list[FetchPolicy] = []
        self.started = threading.Event()
        self._lock = threading.Lock()

    def __call__(self, url: str, policy: FetchPolicy) -> tuple[int, bytes]:
        with self._lock:
            self.calls.append(url)
            self.policies.append(policy)
            queue = self.routes.get(url)
            route: Route = (404, b"")
            if queue:
                route = queue.pop(0) if len(queue) > 1 else queue[0]
        self.started.set()
        if self.gate is not None:
            assert self.gate.wait(5.0), "test gate never opened"
        if isinstance(route, BaseException):
            raise route
        return route

    def count(self, url: str) -> int:
        with self._lock:
            return sum(1 for u in self.calls if u == url)


class WaitCountingCache(FetchCache):
    """FetchCache that signals each time a caller starts waiting on an in-flight download."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.waiting = threading.Semaphore(0)

    def _wait(self, url: str, marker, timeout: float | None) -> EncodedPayload:
        self.waiting.release()
        return super()._wait(url, marker, timeout)

    def await_waiters(self, n: int, timeout: float = 5.0) -> None:
        for _ in range(n):
            assert self.waiting.acquire(timeout=timeout), "waiter never arrived"
