"""Translation cache package.

Provides the in-memory LRU cache, the persistent translation memory and request coalescing.
"""

from __future__ import annotations

from core.cache.inflight_manager import InFlightManager
from core.cache.lru_cache import LRUTranslationCache
from core.cache.memory import TranslationMemory

__all__: list[str] = ["InFlightManager", "LRUTranslationCache", "TranslationMemory"]
