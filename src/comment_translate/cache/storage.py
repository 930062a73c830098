"""Capacity-bounded least-recently-used storage."""

import logging
from collections import OrderedDict

from .models import CacheEntry

logger = logging.getLogger(__name__)


class LRUStorage:
    """Ordered map of digest -> CacheEntry evicting the least recently used.

    The OrderedDict keeps entries in access order, oldest first, so lookup,
    refresh (move_to_end) and eviction (popitem(last=False)) are all O(1).
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, digest: str) -> CacheEntry | None:
        entry = self._entries.get(digest)
        if entry is None:
            return None
        self._entries.move_to_end(digest)
        entry.touch()
        entry.hits += 1
        return entry

    def put(self, digest: str, value: str) -> None:
        entry = self._entries.get(digest)
        if entry is not None:
            entry.value = value
            entry.touch()
            self._entries.move_to_end(digest)
            return

        if len(self._entries) >= self._capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted least recently used entry {evicted[:12]}")
        self._entries[digest] = CacheEntry(value=value)

    def resize(self, capacity: int) -> None:
        """Change the capacity, evicting oldest entries if it shrinks."""
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        while len(self._entries) > capacity:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, digest: object) -> bool:
        return digest in self._entries
