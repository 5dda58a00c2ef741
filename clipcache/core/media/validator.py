# clipcache/core/media/validator.py
"""
Pure URL checks: is this already a playable audio link, or a sharing page?

Neither function touches the network and neither raises; garbage in is simply
"not direct" / "not a sharing page".
"""

from __future__ import annotations

from urllib.parse import urlsplit

from clipcache.core.media.mime import url_extension
from clipcache.schemas.models import FetchPolicy

AUDIO_EXTS = frozenset({".mp3", ".wav", ".ogg", ".m4a", ".mp4", ".aac", ".webm", ".flac"})
DIRECT_MEDIA_SEGMENT = "media/sounds/"
_INLINE_AUDIO_PREFIX = "data:audio/"


def is_direct_audio(url: str | None, *, media_segment: str = DIRECT_MEDIA_SEGMENT) -> bool:
    """
    True when `url` can be downloaded as-is:
      - the path ends in a supported audio extension
      - the URL contains the sharing site's direct-media segment
      - it is an inline `data:audio/...` reference
      - a supported extension is immediately followed by a query string (CDN links)
    """
    if not url:
        return False
    u = url.strip()
    if not u:
        return False

    if url_extension(u) in AUDIO_EXTS:
        return True
    if media_segment in u:
        return True

    low = u.lower()
    if low.startswith(_INLINE_AUDIO_PREFIX):
        return True
    return any(f"{ext}?" in low for ext in AUDIO_EXTS)


def host_of(url: str | None) -> str:
    """Lower-cased host of `url`; scheme-less references are read as https."""
    if not url:
        return ""
    u = url.strip()
    if "://" not in u and not u.startswith("//"):
        u = "https://" + u
    try:
        return (urlsplit(u).hostname or "").lower()
    except ValueError:
        return ""


def is_sharing_page(url: str | None, policy: FetchPolicy | None = None) -> bool:
    """True when `url` lives on the configured sharing site (any subdomain)."""
    domain = (policy or FetchPolicy()).sharing_domain
    host = host_of(url)
    return bool(host) and (host == domain or host.endswith("." + domain))


__all__ = ["AUDIO_EXTS", "DIRECT_MEDIA_SEGMENT", "is_direct_audio", "is_sharing_page", "host_of"]
