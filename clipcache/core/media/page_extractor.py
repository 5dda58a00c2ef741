# clipcache/core/media/page_extractor.py
"""
Sharing-page extractor.

Fetches a sharing-site page and recovers the direct audio URL behind it.
Strategies run in a fixed order and the first hit wins:

  1. preloadAudioUrl = '<value>'   (the page's own canonical reference)
  2. <audio src>
  3. <source src type="audio/*">
  4. <a href> ending in .mp3 under the direct-media segment (document order)
  5. first <a href> ending in .mp3 anywhere

Every hit is normalized to an absolute URL with `make_absolute`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from html import unescape
from urllib.parse import urlsplit, urlunsplit

from bs4 import BeautifulSoup

from clipcache.core.fetch.errors import (
    ExtractionNetworkError,
    ExtractionNotFoundError,
    InvalidReferenceError,
    fetch_error_guard,
)
from clipcache.core.fetch.http import FetchFn, decode_markup, http_get
from clipcache.core.media.validator import is_sharing_page
from clipcache.schemas.models import FetchPolicy

logger = logging.getLogger(__name__)

_PRELOAD_RE = re.compile(r"""preloadAudioUrl\s*=\s*['"]([^'"]+)['"]""")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")

Strategy = Callable[[str, BeautifulSoup, FetchPolicy], str | None]

# -----------------------
# Strategies
# -----------------------


def _clean(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    v = value.strip()
    return v or None


def _from_preload_variable(html: str, soup: BeautifulSoup, policy: FetchPolicy) -> str | None:
    m = _PRELOAD_RE.search(html)
    return _clean(unescape(m.group(1))) if m else None


def _from_audio_tag(html: str, soup: BeautifulSoup, policy: FetchPolicy) -> str | None:
    for tag in soup.find_all("audio", src=True):
        v = _clean(tag.get("src"))
        if v:
            return v
    return None


def _from_audio_source_tag(html: str, soup: BeautifulSoup, policy: FetchPolicy) -> str | None:
    for tag in soup.find_all("source", src=True):
        mime = str(tag.get("type") or "").strip().lower()
        if mime.startswith("audio/"):
            v = _clean(tag.get("src"))
            if v:
                return v
    return None


def _mp3_hrefs(soup: BeautifulSoup) -> list[str]:
    out: list[str] = []
    for tag in soup.find_all("a", href=True):
        v = _clean(tag.get("href"))
        if v and v.lower().endswith(".mp3"):
            out.append(v)
    return out


def _from_media_mp3_link(html: str, soup: BeautifulSoup, policy: FetchPolicy) -> str | None:
    for href in _mp3_hrefs(soup):
        if policy.media_path_segment in href:
            return href
    return None


def _from_any_mp3_link(html: str, soup: BeautifulSoup, policy: FetchPolicy) -> str | None:
    hrefs = _mp3_hrefs(soup)
    return hrefs[0] if hrefs else None


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("preload_variable", _from_preload_variable),
    ("audio_tag", _from_audio_tag),
    ("audio_source_tag", _from_audio_source_tag),
    ("media_mp3_link", _from_media_mp3_link),
    ("any_mp3_link", _from_any_mp3_link),
)

# -----------------------
# Path normalization
# -----------------------


def make_absolute(value: str, page_url: str, policy: FetchPolicy | None = None) -> str:
    """
    Turn an extracted reference into an absolute URL.

      scheme://...      → unchanged
      //host/path       → https://host/path
      /path             → page scheme+host + /path (sharing origin if the page URL is unusable)
      media/...         → sharing origin + /media/...
      anything else     → page directory (up to and including the last '/') + value
    """
    pol = policy or FetchPolicy()
    v = value.strip()

    if _SCHEME_RE.match(v) or v.lower().startswith("data:"):
        return v
    if v.startswith("//"):
        return "https:" + v
    if v.startswith("/"):
        return _origin_of(page_url, pol) + v

    media_prefix = pol.media_path_segment.split("/", 1)[0] + "/"
    if v.startswith(media_prefix):
        return f"{pol.sharing_origin}/{v}"

    return _directory_of(page_url, pol) + v


def _origin_of(page_url: str, policy: FetchPolicy) -> str:
    try:
        parts = urlsplit(page_url.strip())
    except ValueError:
        return policy.sharing_origin
    if parts.scheme and parts.netloc:
        return f"{parts.scheme}://{parts.netloc}"
    return policy.sharing_origin


def _directory_of(page_url: str, policy: FetchPolicy) -> str:
    try:
        parts = urlsplit(page_url.strip())
    except ValueError:
        return policy.sharing_origin + "/"
    if not (parts.scheme and parts.netloc):
        return policy.sharing_origin + "/"
    path = parts.path or "/"
    directory = path[: path.rfind("/") + 1]
    return urlunsplit((parts.scheme, parts.netloc, directory, "", ""))


# -----------------------
# Extractor
# -----------------------


class PageExtractor:
    """
    Resolve a sharing-page URL to its direct audio URL.

    `fetch` is pluggable (same signature as `http_get`) so callers and tests
    can supply their own transport.
    """

    def __init__(self, policy: FetchPolicy | None = None, *, fetch: FetchFn | None = None) -> None:
        self.policy = policy or FetchPolicy()
        self._fetch = fetch or http_get

    def extract(self, page_url: str) -> str:
        """
        Fetch `page_url` and return the absolute audio URL it references.

        Raises:
            InvalidReferenceError: the URL is not on the sharing site
            ExtractionNetworkError: the page could not be fetched
            ExtractionNotFoundError: the page had no recognizable audio reference
        """
        if not is_sharing_page(page_url, self.policy):
            raise InvalidReferenceError(f"not a {self.policy.sharing_domain} page: {page_url}", url=page_url)

        logger.debug("Fetching sharing page %s", page_url)
        with fetch_error_guard(kind="extraction", url=page_url):
            status, body = self._fetch(page_url, self.policy)
            if not 200 <= status < 300:
                raise ExtractionNetworkError(f"HTTP {status} for {page_url}", url=page_url)
            found = self.find_in_markup(decode_markup(body), page_url)

        if found is None:
            logger.warning("No audio reference found on %s", page_url)
            raise ExtractionNotFoundError(f"no audio reference found on {page_url}", url=page_url)
        return found

    def find_in_markup(self, html: str, page_url: str) -> str | None:
        """Run the strategy chain over already-fetched markup; None when nothing matches."""
        soup = BeautifulSoup(html or "", "html.parser")
        for name, strategy in STRATEGIES:
            raw = strategy(html or "", soup, self.policy)
            if raw:
                resolved = make_absolute(raw, page_url, self.policy)
                logger.debug("Strategy %s matched %r -> %s", name, raw, resolved)
                return resolved
        return None


__all__ = ["PageExtractor", "STRATEGIES", "make_absolute"]
