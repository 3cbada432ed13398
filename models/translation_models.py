"""Models for translation requests and results.

Defines the confidence scale, per-request options, the request record, the fixed-shape result record
returned by the resolution engine, and the static provider descriptor used by the provider chain.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Final, Self

from dataclasses_json import DataClassJsonMixin

from utils.string_utils import AUTO_LANGUAGE, StringUtils

__all__: list[str] = [
    "ConfidenceLevel",
    "FallbackFlagPolicy",
    "ProviderDescriptor",
    "TranslationOptions",
    "TranslationRequest",
    "TranslationResult",
    "UsedSource",
]

HIGH_COVERAGE_THRESHOLD: Final[float] = 0.8
MEDIUM_COVERAGE_THRESHOLD: Final[float] = 0.4


class ConfidenceLevel(StrEnum):
    """Ordered confidence scale attached to every translation result.

    The string values are the persisted form. Comparison operators follow trust order,
    so ``ConfidenceLevel.HIGH > ConfidenceLevel.LOW`` holds.
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ConfidenceLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ConfidenceLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ConfidenceLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ConfidenceLevel):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def from_coverage(cls, coverage: float) -> ConfidenceLevel:
        """Map dictionary word coverage to a confidence level.

        Args:
            coverage (float): Fraction of source words that were substituted.

        Returns:
            ConfidenceLevel: HIGH above 0.8, MEDIUM above 0.4, otherwise LOW.
        """
        if coverage > HIGH_COVERAGE_THRESHOLD:
            return cls.HIGH
        if coverage > MEDIUM_COVERAGE_THRESHOLD:
            return cls.MEDIUM
        return cls.LOW

    @classmethod
    def parse(cls, value: str | None) -> ConfidenceLevel:
        """Parse a persisted value; anything unrecognised becomes UNKNOWN."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


_CONFIDENCE_RANK: Final[dict[ConfidenceLevel, int]] = {
    ConfidenceLevel.UNKNOWN: 0,
    ConfidenceLevel.LOW: 1,
    ConfidenceLevel.MEDIUM: 2,
    ConfidenceLevel.HIGH: 3,
}


class FallbackFlagPolicy(StrEnum):
    """How a provider's successful result sets the ``fallback`` flag."""

    NEVER = "never"
    IF_NOT_FIRST = "if_not_first"
    ALWAYS = "always"

    def apply(self, priority_index: int) -> bool:
        """Return the fallback flag for a provider at ``priority_index``."""
        if self is FallbackFlagPolicy.ALWAYS:
            return True
        if self is FallbackFlagPolicy.IF_NOT_FIRST:
            return priority_index > 0
        return False


class UsedSource(StrEnum):
    """Non-provider values of ``TranslationResult.used_source``.

    Provider results carry the provider name instead.
    """

    NONE = "none"
    CACHE = "cache"
    MEMORY = "memory"
    SIMULATION = "simulation"
    EMERGENCY = "emergency"


@dataclass(frozen=True)
class TranslationOptions:
    """Per-request switches.

    Attributes:
        skip_cache (bool): Bypass the LRU cache lookup.
        skip_memory (bool): Bypass the translation memory lookup.
        offline_mode_override (bool | None): Force offline (True) or online (False) for this request only.
            None defers to the process-wide offline flag.
    """

    skip_cache: bool = False
    skip_memory: bool = False
    offline_mode_override: bool | None = None


@dataclass(frozen=True)
class TranslationRequest:
    """A single resolution request.

    Attributes:
        text (str): Text to translate.
        target_language (str): Target language code.
        source_language (str): Source language code, ``auto`` for detection.
        options (TranslationOptions): Per-request switches.
    """

    text: str
    target_language: str
    source_language: str = AUTO_LANGUAGE
    options: TranslationOptions = field(default_factory=TranslationOptions)

    @classmethod
    def create(
        cls,
        text: str | None,
        target_language: str,
        source_language: str | None = AUTO_LANGUAGE,
        options: TranslationOptions | None = None,
    ) -> Self:
        """Build a request with normalized language codes."""
        return cls(
            text=StringUtils.ensure_str(text),
            target_language=StringUtils.normalize_language(target_language),
            source_language=StringUtils.normalize_language(source_language),
            options=options or TranslationOptions(),
        )

    @property
    def cache_key(self) -> str:
        return StringUtils.build_cache_key(self.text, self.source_language, self.target_language)


@dataclass(frozen=True)
class TranslationResult(DataClassJsonMixin):
    """Fixed-shape outcome of a resolution.

    Every field has a value on every path; ``error`` is an empty string when nothing went wrong.

    Attributes:
        text (str): Translated (or placeholder) text.
        confidence (ConfidenceLevel): Trust level of ``text``.
        fallback (bool): True when the result did not come from the most-trusted path for its source.
        used_source (str): Provider name, or one of the ``UsedSource`` values.
        from_cache (bool): Served from the LRU cache.
        from_memory (bool): Served from, or written through from, the translation memory.
        error (str): Description of the failure that led to a degraded result.
    """

    text: str
    confidence: ConfidenceLevel = ConfidenceLevel.UNKNOWN
    fallback: bool = False
    used_source: str = UsedSource.NONE.value
    from_cache: bool = False
    from_memory: bool = False
    error: str = ""

    @property
    def has_error(self) -> bool:
        return bool(self.error)

    @property
    def is_promotable(self) -> bool:
        """High-confidence, non-fallback results qualify for the translation memory."""
        return self.confidence == ConfidenceLevel.HIGH and not self.fallback and not self.has_error

    def copy_with(self, **changes: object) -> TranslationResult:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)  # type: ignore[arg-type]

    @classmethod
    def identity(cls, text: str) -> Self:
        """Result for requests that need no translation."""
        return cls(text=text, confidence=ConfidenceLevel.HIGH, fallback=False, used_source=UsedSource.NONE.value)


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static description of one configured provider.

    Attributes:
        name (str): Provider name, as used in the priority list.
        priority_index (int): Position in the priority list (0 is tried first).
        credentials_present (bool): Whether the provider can be called at all.
        fixed_confidence (ConfidenceLevel): Confidence assigned to every successful result.
        fallback_flag_policy (FallbackFlagPolicy): How the ``fallback`` flag is set on success.
    """

    name: str
    priority_index: int
    credentials_present: bool
    fixed_confidence: ConfidenceLevel
    fallback_flag_policy: FallbackFlagPolicy

    @property
    def fallback_flag(self) -> bool:
        return self.fallback_flag_policy.apply(self.priority_index)
