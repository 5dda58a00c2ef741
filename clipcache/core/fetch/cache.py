# clipcache/core/fetch/cache.py
"""
In-memory fetch cache for resolved audio URLs.

Per-key lifecycle:

    Absent ──fetch──▶ InFlight ──ok──▶ Cached ──evict/clear──▶ Absent
                          └──fail/timeout──▶ Absent

One lock guards both the entry map and the in-flight map. It is held only for
the claim (Absent → InFlight) and publish (InFlight → Cached/Absent)
transitions, never across network I/O, so different keys download in parallel
and a given key has exactly one registered owner at a time. Everyone else who
asks for that key while it is in flight waits on the owner's marker and gets
the owner's result, success or failure.

An owner that passes `timeout` runs the download on a worker thread and waits
on its own marker like everyone else. If the deadline passes first, the key goes
back to Absent and the download finishes unobserved.

Entries never expire; growth is bounded only by explicit `evict` / `clear`.
"""

from __future__ import annotations

import base64
import binascii
import logging
import threading
from datetime import datetime, timezone

from clipcache.core.fetch.errors import (
    DownloadError,
    DownloadTimeoutError,
    InvalidReferenceError,
    fetch_error_guard,
)
from clipcache.core.fetch.http import FetchFn, http_get
from clipcache.core.media.mime import classify
from clipcache.schemas.models import CacheStats, EncodedPayload, FetchPolicy

logger = logging.getLogger(__name__)

_INLINE_PREFIX = "data:audio/"


def encode_payload(url: str, body: bytes) -> EncodedPayload:
    """Wrap downloaded bytes as a content-type-tagged base64 data URI."""
    content_type = classify(url)
    b64 = base64.b64encode(body).decode("ascii")
    return EncodedPayload(
        source_url=url,
        content_type=content_type,
        encoded=f"data:{content_type};base64,{b64}",
        raw_size=len(body),
        fetched_at=datetime.now(timezone.utc),
    )


def _inline_payload(url: str) -> EncodedPayload:
    # data:audio/<sub>;base64,<data> is already a payload; validate and keep its own type
    header, sep, data = url.partition(",")
    if not sep or not header.lower().endswith(";base64"):
        raise DownloadError("inline audio must be base64 encoded", url=url)
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DownloadError(f"invalid inline audio: {e}", url=url) from e
    if not raw:
        raise DownloadError("inline audio is empty", url=url)
    content_type = header[len("data:") : -len(";base64")]
    return EncodedPayload(
        source_url=url,
        content_type=content_type,
        encoded=url,
        raw_size=len(raw),
        fetched_at=datetime.now(timezone.utc),
    )


class _InFlight:
    """Marker for a running download; carries the outcome to waiters."""

    __slots__ = ("done", "payload", "error")

    def __init__(self) -> None:
        self.done = threading.Event()
        self.payload: EncodedPayload | None = None
        self.error: DownloadError | None = None


class FetchCache:
    """
    Deduplicating, thread-safe cache of encoded audio payloads keyed by resolved URL.

    Example:
        cache = FetchCache(policy)
        payload = cache.fetch("https://x.example/clip.mp3")   # downloads
        payload = cache.fetch("https://x.example/clip.mp3")   # served from memory
    """

    def __init__(self, policy: FetchPolicy | None = None, *, fetch: FetchFn | None = None) -> None:
        self.policy = policy or FetchPolicy()
        self._fetch = fetch or http_get
        self._lock = threading.Lock()
        self._entries: dict[str, EncodedPayload] = {}
        self._in_flight: dict[str, _InFlight] = {}

    # -------------------------
    # Public API
    # -------------------------

    def fetch(self, url: str, *, timeout: float | None = None) -> EncodedPayload:
        """
        Return the payload for `url`, downloading it only if nobody has yet.

        Args:
            url:     Resolved direct-audio URL (the cache key).
            timeout: Max seconds this caller waits for the payload. A waiter that
                     gives up leaves the owner alone. An owner that runs out of
                     time drops the key back to Absent and fails its waiters;
                     the late download is discarded.

        Raises:
            DownloadError: the download failed (for the owner and every waiter alike)
            DownloadTimeoutError: the payload was not ready within `timeout`
        """
        if not url or not url.strip():
            raise InvalidReferenceError("a resolved URL is required")

        with self._lock:
            hit = self._entries.get(url)
            if hit is not None:
                logger.debug("Cache hit: %s", url)
                return hit
            marker = self._in_flight.get(url)
            owner = marker is None
            if marker is None:
                marker = _InFlight()
                self._in_flight[url] = marker

        if not owner:
            logger.debug("Waiting on in-flight download: %s", url)
            return self._wait(url, marker, timeout)
        if timeout is None:
            return self._run_as_owner(url, marker)
        return self._run_with_deadline(url, marker, timeout)

    def contains(self, url: str) -> bool:
        with self._lock:
            return url in self._entries

    def is_downloading(self, url: str) -> bool:
        with self._lock:
            return url in self._in_flight

    def get(self, url: str) -> EncodedPayload | None:
        """Cached payload or None; never downloads."""
        with self._lock:
            return self._entries.get(url)

    def size_bytes(self) -> int:
        with self._lock:
            return sum(p.encoded_length for p in self._entries.values())

    def evict(self, url: str) -> bool:
        """Drop one entry. Returns True if something was removed; safe to repeat."""
        with self._lock:
            removed = self._entries.pop(url, None) is not None
        if removed:
            logger.debug("Evicted %s", url)
        return removed

    def clear(self) -> None:
        """
        Drop every entry and every in-flight marker.

        Downloads already running still hand their result to their own waiters,
        but they no longer publish into the cache. Until they finish, a new
        fetch of the same URL starts a second download alongside the old one.
        """
        with self._lock:
            self._entries.clear()
            self._in_flight.clear()
        logger.debug("Cache cleared")

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                entries=len(self._entries),
                in_flight=len(self._in_flight),
                size_bytes=sum(p.encoded_length for p in self._entries.values()),
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # -------------------------
    # Internals
    # -------------------------

    def _wait(self, url: str, marker: _InFlight, timeout: float | None) -> EncodedPayload:
        if not marker.done.wait(timeout):
            raise DownloadTimeoutError(f"gave up after {timeout}s waiting for {url}", url=url)
        return self._outcome(url, marker)

    @staticmethod
    def _outcome(url: str, marker: _InFlight) -> EncodedPayload:
        err = marker.error
        if err is not None:
            # fresh instance per caller; the shared one stays as __cause__
            raise type(err)(str(err), url=err.url or url, status_code=err.status_code) from err
        if marker.payload is None:
            raise DownloadError(f"download of {url} finished without a payload", url=url)
        return marker.payload

    def _settle(
        self,
        url: str,
        marker: _InFlight,
        payload: EncodedPayload | None,
        error: DownloadError | None,
    ) -> bool:
        """Record the outcome once. Returns False if the marker was already settled."""
        with self._lock:
            if marker.done.is_set():
                return False
            if self._in_flight.get(url) is marker:
                del self._in_flight[url]
                if payload is not None:
                    self._entries[url] = payload
            marker.payload = payload
            marker.error = error
            marker.done.set()
        return True

    def _run_with_deadline(self, url: str, marker: _InFlight, timeout: float) -> EncodedPayload:
        worker = threading.Thread(
            target=self._download_in_background,
            args=(url, marker),
            name="clipcache-download",
            daemon=True,
        )
        worker.start()
        if not marker.done.wait(timeout):
            err = DownloadTimeoutError(f"download of {url} took longer than {timeout}s", url=url)
            if self._settle(url, marker, None, err):
                logger.warning("Download timed out for %s after %ss", url, timeout)
        return self._outcome(url, marker)

    def _download_in_background(self, url: str, marker: _InFlight) -> None:
        try:
            self._run_as_owner(url, marker)
        except DownloadError:
            return  # reported through the marker
        except Exception:
            logger.exception("Unexpected error downloading %s", url)

    def _run_as_owner(self, url: str, marker: _InFlight) -> EncodedPayload:
        payload: EncodedPayload | None = None
        error: DownloadError | None = None
        try:
            payload = self._download(url)
            return payload
        except DownloadError as e:
            error = e
            logger.warning("Download failed for %s: %s", url, e)
            raise
        except BaseException as e:
            # interrupted owner (KeyboardInterrupt, SystemExit, ...): waiters still get an answer
            error = DownloadError(f"download abandoned: {type(e).__name__}", url=url)
            raise
        finally:
            if payload is None and error is None:
                error = DownloadError("download produced no payload", url=url)
            if not self._settle(url, marker, payload, error):
                logger.debug("Discarding late result for %s", url)

    def _download(self, url: str) -> EncodedPayload:
        if url.lower().startswith(_INLINE_PREFIX):
            return _inline_payload(url)

        logger.debug("Downloading %s", url)
        with fetch_error_guard(kind="download", url=url):
            status, body = self._fetch(url, self.policy)
        if not 200 <= status < 300:
            raise DownloadError(f"HTTP {status} for {url}", url=url, status_code=status)
        if not body:
            raise DownloadError(f"empty response body for {url}", url=url, status_code=status)

        payload = encode_payload(url, body)
        logger.info("Downloaded %s (%d bytes, %s)", url, payload.raw_size, payload.content_type)
        return payload


__all__ = ["FetchCache", "encode_payload"]
