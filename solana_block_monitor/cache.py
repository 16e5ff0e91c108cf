"""Thread-safe in-memory cache of confirmed block numbers."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict

logger = logging.getLogger(__name__)

_MIN_CAPACITY = 64
DEFAULT_CAPACITY = 1000


def _round_capacity(requested: int) -> int:
    """Round a requested size up to a power of two, never below the minimum."""
    if requested <= _MIN_CAPACITY:
        return _MIN_CAPACITY
    return 1 << (requested - 1).bit_length()


class BlockCache:
    """Set of confirmed block numbers with least-recently-used eviction.

    The cache keeps at least ``capacity`` entries (rounded up to a power of
    two) and evicts the least recently used block once twice that many are
    held.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = _round_capacity(capacity)
        self._max_entries = _round_capacity(capacity * 2)
        self._entries: OrderedDict[int, None] = OrderedDict()
        self._lock = threading.Lock()
        logger.info("Created block cache capacity=%d", capacity)

    def contains(self, block_number: int) -> bool:
        """Return whether the block is cached, marking it as recently used."""
        with self._lock:
            exists = block_number in self._entries
            if exists:
                self._entries.move_to_end(block_number)
        logger.debug("Checked block in cache block_number=%d exists=%s", block_number, exists)
        return exists

    def __contains__(self, block_number: object) -> bool:
        return isinstance(block_number, int) and self.contains(block_number)

    def insert(self, block_number: int) -> bool:
        """Add a block; return False if it was already present."""
        with self._lock:
            if block_number in self._entries:
                inserted = False
            else:
                self._entries[block_number] = None
                while len(self._entries) > self._max_entries:
                    self._entries.popitem(last=False)
                inserted = True
        if inserted:
            logger.debug("Inserted block into cache block_number=%d", block_number)
        else:
            logger.warning("Failed to insert block into cache block_number=%d", block_number)
        return inserted

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def is_empty(self) -> bool:
        return len(self) == 0

    def capacity(self) -> int:
        """Return the rounded capacity of the cache."""
        return self._capacity

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Cleared block cache")