"""Fixed-capacity in-memory LRU cache of translation results."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from models.cache_models import CacheStats
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterator

    from models.translation_models import TranslationResult

__all__: list[str] = ["LRUTranslationCache"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


@dataclass
class _CacheEntry:
    result: TranslationResult
    last_access: int


class LRUTranslationCache:
    """Least-recently-used cache keyed by ``source:target:text``.

    Recency is tracked with a strictly increasing counter rather than wall-clock time, so two
    entries can never share a stamp and eviction is deterministic.

    Attributes:
        DEFAULT_CAPACITY (ClassVar[int]): Capacity used when none is given.
    """

    DEFAULT_CAPACITY: ClassVar[int] = 200

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """Initialize the cache.

        Args:
            capacity (int): Maximum number of entries. Must be at least 1.

        Raises:
            ValueError: If capacity is less than 1.
        """
        if capacity < 1:
            msg: str = f"Cache capacity must be at least 1, got {capacity}"
            raise ValueError(msg)
        self._capacity: int = capacity
        self._entries: dict[str, _CacheEntry] = {}
        self._clock: Iterator[int] = itertools.count(1)
        self._lock: threading.Lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> TranslationResult | None:
        """Return the cached result for ``key`` and mark it as most recently used."""
        with self._lock:
            entry: _CacheEntry | None = self._entries.get(key)
            if entry is None:
                logger.debug("LRU cache miss for key: %s", key[:32])
                return None
            entry.last_access = next(self._clock)
            logger.debug("LRU cache hit for key: %s", key[:32])
            return entry.result

    def set(self, key: str, result: TranslationResult) -> bool:
        """Store ``result`` under ``key``.

        Results carrying an error are refused. Inserting a new key into a full cache evicts the
        least recently used entry; updating an existing key never evicts.

        Returns:
            bool: True if the result was stored.
        """
        if result.has_error:
            logger.debug("Refusing to cache an error result for key: %s", key[:32])
            return False

        with self._lock:
            stamp: int = next(self._clock)
            entry: _CacheEntry | None = self._entries.get(key)
            if entry is not None:
                entry.result = result
                entry.last_access = stamp
                return True

            if len(self._entries) >= self._capacity:
                self._evict_oldest()
            self._entries[key] = _CacheEntry(result=result, last_access=stamp)
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("LRU cache cleared")

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(size=len(self._entries), capacity=self._capacity)

    def _evict_oldest(self) -> None:
        # Caller holds the lock.
        oldest_key: str = min(self._entries, key=lambda k: self._entries[k].last_access)
        del self._entries[oldest_key]
        logger.debug("Evicted LRU entry: %s", oldest_key[:32])
