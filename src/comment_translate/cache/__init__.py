"""Bounded in-memory translation cache for comment-translate."""

from .manager import TranslationCacheManager
from .models import CacheEntry, CacheKey
from .storage import LRUStorage

__all__ = ["CacheEntry", "CacheKey", "LRUStorage", "TranslationCacheManager"]
