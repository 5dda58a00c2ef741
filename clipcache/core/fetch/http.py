# clipcache/core/fetch/http.py
"""
Minimal HTTP GET used for both sharing-page markup and audio bytes.

A fresh requests.Session is created per call and never consults proxy
environment variables, so nothing here is shared between threads.
"""

from __future__ import annotations

from collections.abc import Callable

import requests

from clipcache.schemas.models import FetchPolicy

# Fetch signature: (url, policy) -> (status_code, body_bytes)
FetchFn = Callable[[str, FetchPolicy], tuple[int, bytes]]


def _session(user_agent: str) -> requests.Session:
    s = requests.Session()
    # no proxies from env, no .netrc
    s.trust_env = False
    s.headers.update({"User-Agent": user_agent, "Accept": "*/*"})
    return s


def http_get(url: str, policy: FetchPolicy) -> tuple[int, bytes]:
    """
    GET `url` with the policy's User-Agent and timeout, returning (status, body).

    Transport failures propagate as requests exceptions; callers wrap them with
    `fetch_error_guard` to get a typed error for their side of the pipeline.
    """
    with _session(policy.user_agent) as s:
        resp = s.get(url, timeout=policy.timeout_s, allow_redirects=True)
        try:
            return resp.status_code, resp.content
        finally:
            resp.close()


def decode_markup(body: bytes) -> str:
    return body.decode("utf-8", errors="ignore")


__all__ = ["FetchFn", "http_get", "decode_markup"]
