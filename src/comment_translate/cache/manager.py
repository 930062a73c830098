"""Translation cache manager.

Wraps LRUStorage with the key construction and the enabled/disabled policy.
The policy check lives here, at the boundary: when caching is turned off
nothing reaches the storage at all.
"""

import logging

from ..config import CacheConfig, clamp_capacity
from .models import CacheKey
from .storage import LRUStorage

logger = logging.getLogger(__name__)


class TranslationCacheManager:
    """Process-wide cache of translations keyed by (text, target, source).

    Example:
        cache = TranslationCacheManager(max_entries=5)
        cache.set("hello", "こんにちは", "ja")
        cache.get("hello", "ja")        # "こんにちは"
        cache.get("hello", "ja", "en")  # None, different source language
    """

    def __init__(self, max_entries: int = 1000, enabled: bool = True) -> None:
        """Initialize the cache.

        Args:
            max_entries: Maximum number of entries; values < 1 are clamped to 1
            enabled: When False, get() always misses and set() does nothing
        """
        self.enabled = enabled
        self._storage = LRUStorage(clamp_capacity(max_entries))
        logger.debug(
            f"TranslationCacheManager initialized with capacity "
            f"{self._storage.capacity} (enabled={enabled})"
        )

    @classmethod
    def from_config(cls, config: CacheConfig) -> "TranslationCacheManager":
        return cls(max_entries=config.max_entries, enabled=config.enabled)

    @property
    def max_entries(self) -> int:
        return self._storage.capacity

    def configure(self, max_entries: int, enabled: bool) -> None:
        """Apply a new capacity and policy.

        Shrinking evicts least recently used entries; disabling drops
        everything so no entry is retained while the cache is off.
        """
        self._storage.resize(clamp_capacity(max_entries))
        self.enabled = enabled
        if not enabled:
            self._storage.clear()
        logger.debug(
            f"Cache reconfigured: capacity {self._storage.capacity}, enabled={enabled}"
        )

    def get(
        self, text: str, target_lang: str, source_lang: str | None = None
    ) -> str | None:
        """Look up a cached translation.

        Args:
            text: Original text
            target_lang: Target language code
            source_lang: Source language code, None for auto-detection

        Returns:
            Cached translation, or None on a miss or when caching is disabled
        """
        if not self.enabled:
            return None

        entry = self._storage.get(CacheKey(text, target_lang, source_lang).digest)
        if entry is None:
            logger.debug(f"Cache miss for '{text[:50]}' ({source_lang or 'auto'}->{target_lang})")
            return None

        logger.debug(f"Cache hit for '{text[:50]}' ({source_lang or 'auto'}->{target_lang})")
        return entry.value

    def set(
        self,
        text: str,
        value: str,
        target_lang: str,
        source_lang: str | None = None,
    ) -> None:
        """Store a translation, evicting the least recently used entry if full."""
        if not self.enabled:
            return
        self._storage.put(CacheKey(text, target_lang, source_lang).digest, value)

    def clear(self) -> None:
        self._storage.clear()
        logger.debug("Cache cleared")

    def size(self) -> int:
        return len(self._storage)
