# clipcache/core/media/resolver.py
"""
Reference → direct audio URL.

Order matters: a reference that already looks like direct audio is returned
untouched even when it sits on the sharing domain; only non-direct sharing-site
links pay for a page fetch.
"""

from __future__ import annotations

import logging

from clipcache.core.fetch.errors import InvalidReferenceError
from clipcache.core.media.page_extractor import PageExtractor
from clipcache.core.media.validator import is_direct_audio, is_sharing_page
from clipcache.schemas.models import FetchPolicy

logger = logging.getLogger(__name__)


def _with_scheme(reference: str) -> str:
    if "://" in reference:
        return reference
    if reference.startswith("//"):
        return "https:" + reference
    return "https://" + reference


def resolve(
    reference: str | None,
    *,
    policy: FetchPolicy | None = None,
    extractor: PageExtractor | None = None,
) -> str:
    """
    Resolve a user-supplied reference to a fetchable direct audio URL.

    Raises:
        InvalidReferenceError: blank input, or neither direct audio nor a sharing-page link
        ExtractionNotFoundError / ExtractionNetworkError: sharing page had no audio / was unreachable
    """
    ref = (reference or "").strip()
    if not ref:
        raise InvalidReferenceError("a URL is required")

    pol = policy or (extractor.policy if extractor else FetchPolicy())

    if is_direct_audio(ref, media_segment=pol.media_path_segment):
        logger.debug("Direct audio reference: %s", ref)
        return ref

    if is_sharing_page(ref, pol):
        page_url = _with_scheme(ref)
        ext = extractor or PageExtractor(pol)
        resolved = ext.extract(page_url)
        logger.info("Extracted %s from sharing page %s", resolved, page_url)
        return resolved

    raise InvalidReferenceError(
        f"not a direct audio link (.mp3, .wav, ...) or a {pol.sharing_domain} page: {ref}",
        url=ref,
    )


__all__ = ["resolve"]
