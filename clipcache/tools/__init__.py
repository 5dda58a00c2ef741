# clipcache/tools/__init__.py
from .clip_service import ClipService

__all__ = ["ClipService"]
