# tests/__init__.py
"""
Expose common test data and fakes so tests can import directly:
    from tests import FakeFetch, make_policy
"""

from .utils import CLIP_BYTES, CLIP_URL, PAGE_URL, FakeFetch, make_policy

__all__ = ["FakeFetch", "make_policy", "CLIP_URL", "CLIP_BYTES", "PAGE_URL"]
