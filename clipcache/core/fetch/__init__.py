# clipcache/core/fetch/__init__.py
from .errors import (
    CLIP_ERRORS,
    ClipCacheError,
    DownloadError,
    DownloadTimeoutError,
    ExtractionError,
    ExtractionNetworkError,
    ExtractionNotFoundError,
    InvalidReferenceError,
    classify_fetch_error,
    fetch_error_guard,
)
from .http import http_get
from .cache import FetchCache, encode_payload
from .prefetch import Prefetcher

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
    "http_get",
    "FetchCache",
    "encode_payload",
    "Prefetcher",
]
