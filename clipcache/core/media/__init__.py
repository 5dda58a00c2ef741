# clipcache/core/media/__init__.py
from .mime import classify
from .validator import is_direct_audio, is_sharing_page
from .page_extractor import PageExtractor, make_absolute
from .resolver import resolve

__all__ = [
    "classify",
    "is_direct_audio",
    "is_sharing_page",
    "PageExtractor",
    "make_absolute",
    "resolve",
]
