"""Data models for the translation resolver.

This package contains dataclass definitions for configuration, translation requests/results,
provider descriptors, and cache/memory records.
"""

from __future__ import annotations

from models.cache_models import CacheStats, MemoryEntry, MemoryStatistics
from models.config_models import Config
from models.translation_models import (
    ConfidenceLevel,
    FallbackFlagPolicy,
    ProviderDescriptor,
    TranslationOptions,
    TranslationRequest,
    TranslationResult,
    UsedSource,
)

__all__: list[str] = [
    "CacheStats",
    "ConfidenceLevel",
    "Config",
    "FallbackFlagPolicy",
    "MemoryEntry",
    "MemoryStatistics",
    "ProviderDescriptor",
    "TranslationOptions",
    "TranslationRequest",
    "TranslationResult",
    "UsedSource",
]
