"""Translation resolution and provider interfaces.

This package provides the resolution engine, the priority-ordered provider chain with pluggable
adapters (DeepL, Google Cloud, Microsoft, LibreTranslate) and the offline dictionary simulator.
"""

from core.trans.chain import ProviderChain
from core.trans.interface import (
    AllProvidersFailedError,
    NoProvidersConfiguredError,
    NotSupportedLanguagesError,
    ProviderNetworkError,
    ProviderResponseError,
    TransInterface,
    TranslateExceptionError,
    TranslationQuotaExceededError,
    TranslationRateLimitError,
)
from core.trans.manager import ResolutionEngine
from core.trans.simulator import LocalSimulator, fallback_translation

__all__: list[str] = [
    "AllProvidersFailedError",
    "LocalSimulator",
    "NoProvidersConfiguredError",
    "NotSupportedLanguagesError",
    "ProviderChain",
    "ProviderNetworkError",
    "ProviderResponseError",
    "ResolutionEngine",
    "TransInterface",
    "TranslateExceptionError",
    "TranslationQuotaExceededError",
    "TranslationRateLimitError",
    "fallback_translation",
]
