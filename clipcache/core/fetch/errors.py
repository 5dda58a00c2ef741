# clipcache/core/fetch/errors.py
"""
Typed errors + utilities for clip resolution and downloading.

Exports
-------
- ClipCacheError (base)
- InvalidReferenceError
- ExtractionError, ExtractionNotFoundError, ExtractionNetworkError
- DownloadError, DownloadTimeoutError
- CLIP_ERRORS
- classify_fetch_error(exc, kind="download", url=None)
- fetch_error_guard(kind="download", url=None)
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Literal

import requests

# =========================
# Exception types
# =========================


class ClipCacheError(RuntimeError):
    """Base class for resolution and download failures."""

    retryable: bool = False

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class InvalidReferenceError(ClipCacheError):
    """Blank input, or neither a direct audio link nor a sharing-page link."""


class ExtractionError(ClipCacheError):
    """A sharing page could not be turned into a direct audio URL."""


class ExtractionNotFoundError(ExtractionError):
    """The page was fetched but none of the extraction strategies matched."""


class ExtractionNetworkError(ExtractionError):
    """The sharing page could not be fetched (transport error or bad status)."""

    retryable = True


class DownloadError(ClipCacheError):
    """Resolved URL unreachable, non-success status, or empty body."""

    retryable = True

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message, url=url)
        self.status_code = status_code


class DownloadTimeoutError(DownloadError):
    """The payload was not ready within the caller's timeout."""


# Selector tuple for grouped exception handling
CLIP_ERRORS = (
    InvalidReferenceError,
    ExtractionNotFoundError,
    ExtractionNetworkError,
    DownloadError,
)

ErrorKind = Literal["download", "extraction"]

# =========================
# Classification helpers
# =========================


def classify_fetch_error(exc: Exception, *, kind: ErrorKind = "download", url: str | None = None) -> ClipCacheError:
    """
    Map arbitrary exceptions raised by HTTP internals to a typed ClipCacheError.

    Heuristics:
      - ClipCacheError subclasses → passed through
      - requests.HTTPError → carries status code when available
      - any other exception while talking to the network → the transport error of `kind`
        (DownloadError for downloads, ExtractionNetworkError for page fetches)
    """
    if isinstance(exc, ClipCacheError):
        return exc

    msg = f"{type(exc).__name__}: {exc}"

    if kind == "extraction":
        return ExtractionNetworkError(msg, url=url)

    status: int | None = None
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        status = exc.response.status_code
    return DownloadError(msg, url=url, status_code=status)


@contextmanager
def fetch_error_guard(*, kind: ErrorKind = "download", url: str | None = None) -> Iterator[None]:
    """Context manager to normalize unexpected exceptions from HTTP internals."""
    try:
        yield
    except CLIP_ERRORS:
        raise
    except Exception as exc:  # noqa: BLE001
        raise classify_fetch_error(exc, kind=kind, url=url) from exc


__all__ = [
    "ClipCacheError",
    "InvalidReferenceError",
    "ExtractionError",
    "ExtractionNotFoundError",
    "ExtractionNetworkError",
    "DownloadError",
    "DownloadTimeoutError",
    "CLIP_ERRORS",
    "classify_fetch_error",
    "fetch_error_guard",
]
