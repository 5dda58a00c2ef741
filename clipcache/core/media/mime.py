# clipcache/core/media/mime.py
"""
Extension → audio MIME type table.

The content type is derived from the URL alone (never from response headers),
so the same URL always encodes to the same data URI header.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import urlsplit

DEFAULT_AUDIO_MIME = "audio/mpeg"

_AUDIO_MIME_BY_EXT: dict[str, str] = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".mp4": "audio/mp4",
    ".aac": "audio/aac",
    ".webm": "audio/webm",
}


def url_extension(url: str | None) -> str:
    """Lower-cased suffix of the URL path ('' when there is none)."""
    if not url:
        return ""
    try:
        path = urlsplit(url.strip()).path
    except ValueError:
        path = url.split("?", 1)[0].split("#", 1)[0]
    return PurePosixPath(path).suffix.lower()


def classify(url: str | None) -> str:
    """Return the audio content type for `url`; unknown or missing extensions map to audio/mpeg."""
    return _AUDIO_MIME_BY_EXT.get(url_extension(url), DEFAULT_AUDIO_MIME)


__all__ = ["DEFAULT_AUDIO_MIME", "classify", "url_extension"]
