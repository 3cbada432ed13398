"""Models for cache and translation memory data.

Defines the translation memory entry, LRU cache statistics and memory statistics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from dataclasses_json import DataClassJsonMixin, config

from models.translation_models import ConfidenceLevel

__all__: list[str] = [
    "CacheStats",
    "MemoryEntry",
    "MemoryStatistics",
]


@dataclass
class MemoryEntry(DataClassJsonMixin):
    """Translation memory entry.

    Attributes:
        cache_key (str): ``source:target:text`` key shared with the LRU cache.
        source_text (str): Normalized source text.
        source_language (str): Source language code.
        target_language (str): Target language code.
        translation (str): Approved translation.
        confidence (ConfidenceLevel): Confidence recorded at promotion time.
        timestamp (datetime): Time of the last promotion.
    """

    cache_key: str
    source_text: str
    source_language: str
    target_language: str
    translation: str
    confidence: ConfidenceLevel
    timestamp: datetime = field(
        metadata=config(encoder=datetime.isoformat, decoder=datetime.fromisoformat)
    )


@dataclass
class CacheStats:
    """LRU cache occupancy.

    Attributes:
        size (int): Number of stored entries.
        capacity (int): Maximum number of entries.
    """

    size: int = 0
    capacity: int = 0


@dataclass
class MemoryStatistics:
    """Translation memory usage statistics.

    Attributes:
        total_entries (int): Number of stored entries.
        language_pair_distribution (dict[str, int]): Entries per ``source:target`` pair.
        confidence_distribution (dict[str, int]): Entries per confidence value.
        oldest_entry (datetime | None): Oldest promotion time.
        newest_entry (datetime | None): Newest promotion time.
    """

    total_entries: int = 0
    language_pair_distribution: dict[str, int] = field(default_factory=dict)
    confidence_distribution: dict[str, int] = field(default_factory=dict)
    oldest_entry: datetime | None = None
    newest_entry: datetime | None = None
