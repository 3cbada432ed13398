# ruff: noqa: BLE001
"""Priority-ordered chain of translation providers.

The chain builds one adapter per name in ``TRANSLATION.PRIORITY`` and tries the credentialed ones in
order until one returns a translation. The confidence and fallback flag of a success come from the
static policy table below, not from the adapter.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from core.trans.interface import (
    AllProvidersFailedError,
    NoProvidersConfiguredError,
    TransInterface,
    TranslateExceptionError,
)
from models.translation_models import ConfidenceLevel, FallbackFlagPolicy, ProviderDescriptor, TranslationResult
from utils.logger_utils import LoggerUtils
from utils.string_utils import AUTO_LANGUAGE, StringUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config

__all__: list[str] = ["DEFAULT_PROVIDER_POLICY", "PROVIDER_POLICY_TABLE", "ProviderChain", "ProviderPolicy"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


@dataclass(frozen=True)
class ProviderPolicy:
    confidence: ConfidenceLevel
    fallback_flag_policy: FallbackFlagPolicy


PROVIDER_POLICY_TABLE: Final[dict[str, ProviderPolicy]] = {
    "deepl": ProviderPolicy(ConfidenceLevel.HIGH, FallbackFlagPolicy.NEVER),
    "google": ProviderPolicy(ConfidenceLevel.HIGH, FallbackFlagPolicy.NEVER),
    "microsoft": ProviderPolicy(ConfidenceLevel.HIGH, FallbackFlagPolicy.IF_NOT_FIRST),
    # The free provider is always reported as a fallback, even when it is first.
    "libre": ProviderPolicy(ConfidenceLevel.MEDIUM, FallbackFlagPolicy.ALWAYS),
}

# Applied to registered adapters that have no row in the table.
DEFAULT_PROVIDER_POLICY: Final[ProviderPolicy] = ProviderPolicy(ConfidenceLevel.MEDIUM, FallbackFlagPolicy.IF_NOT_FIRST)


class ProviderChain:
    """Ordered provider adapters with fall-through on failure.

    Args:
        config (Config): Resolver configuration; ``TRANSLATION.PRIORITY`` and ``PROVIDER_TIMEOUT`` are used.
    """

    def __init__(self, config: Config) -> None:
        self.config: Config = config
        self.timeout: float = config.TRANSLATION.PROVIDER_TIMEOUT
        self._descriptors: list[ProviderDescriptor] = []
        self._instances: dict[str, TransInterface] = {}
        logger.debug("Registered translation engines: %s", list(TransInterface.registered))

    @property
    def providers(self) -> tuple[ProviderDescriptor, ...]:
        """Descriptors in priority order, including providers without credentials."""
        return tuple(self._descriptors)

    @property
    def has_available_providers(self) -> bool:
        return any(d.credentials_present for d in self._descriptors)

    def initialize(self) -> None:
        """Build the descriptors and adapters from the configured priority list."""
        logger.info("ProviderChain initialization started")
        self._descriptors.clear()
        self._instances.clear()

        for index, name in enumerate(self.config.TRANSLATION.PRIORITY):
            _cls: type[TransInterface] | None = TransInterface.registered.get(name)
            if _cls is None:
                logger.warning("Translation provider not found, ignored: '%s'", name)
                continue

            instance: TransInterface = _cls()
            credentials_present: bool = instance.has_credentials
            if credentials_present:
                try:
                    instance.initialize(self.config)
                except RuntimeError as err:
                    logger.critical("RuntimeError in '%s' provider setup: %s", name, err)
                    credentials_present = False
                except TranslateExceptionError as err:
                    logger.critical("Exception in '%s' provider setup: %s", name, err)
                    credentials_present = False
                else:
                    self._instances[name] = instance
                    logger.info("Translation provider initialized: '%s'", name)
            else:
                logger.info("Translation provider skipped (no credentials): '%s'", name)

            policy: ProviderPolicy = PROVIDER_POLICY_TABLE.get(name, DEFAULT_PROVIDER_POLICY)
            self._descriptors.append(
                ProviderDescriptor(
                    name=name,
                    priority_index=index,
                    credentials_present=credentials_present,
                    fixed_confidence=policy.confidence,
                    fallback_flag_policy=policy.fallback_flag_policy,
                )
            )

        logger.info(
            "ProviderChain ready: %s", [d.name for d in self._descriptors if d.credentials_present] or "no providers"
        )

    async def resolve(
        self, text: str, target_language: str, source_language: str | None = AUTO_LANGUAGE
    ) -> TranslationResult:
        """Translate with the first provider that succeeds.

        Args:
            text (str): Text to translate.
            target_language (str): Target language code.
            source_language (str | None): Source language code; ``auto`` lets the provider detect it.

        Returns:
            TranslationResult: Result of the first successful provider.

        Raises:
            NoProvidersConfiguredError: If no provider has credentials.
            AllProvidersFailedError: If every credentialed provider failed.
        """
        available: list[ProviderDescriptor] = sorted(
            (d for d in self._descriptors if d.credentials_present and d.name in self._instances),
            key=lambda d: d.priority_index,
        )
        if not available:
            msg: str = "No translation providers are configured with credentials"
            raise NoProvidersConfiguredError(msg)

        source: str = StringUtils.normalize_language(source_language)
        src_lang: str | None = None if source == AUTO_LANGUAGE else source
        tgt_lang: str = StringUtils.normalize_language(target_language)

        failures: list[tuple[str, str]] = []
        for descriptor in available:
            reason: str | None = None
            translated: str = ""
            try:
                translated = await asyncio.wait_for(
                    self._instances[descriptor.name].translation(text, tgt_lang, src_lang),
                    timeout=self.timeout,
                )
            except TimeoutError:
                reason = f"timed out after {self.timeout:g}s"
            except TranslateExceptionError as err:
                reason = f"{type(err).__name__}: {err}"
            except Exception as err:
                reason = f"unexpected {type(err).__name__}: {err}"
            else:
                if not isinstance(translated, str) or not translated.strip():
                    reason = "empty translation"

            if reason is not None:
                logger.warning("Translation provider '%s' failed: %s", descriptor.name, reason)
                failures.append((descriptor.name, reason))
                continue

            logger.debug("Translation provider '%s' succeeded", descriptor.name)
            return TranslationResult(
                text=translated,
                confidence=descriptor.fixed_confidence,
                fallback=descriptor.fallback_flag,
                used_source=descriptor.name,
            )

        raise AllProvidersFailedError(failures)

    async def close(self) -> None:
        """Close every adapter; errors are logged and do not stop the others."""
        for name, instance in self._instances.items():
            try:
                await instance.close()
            except Exception as err:
                logger.error("Error closing translation provider '%s': %s", name, err)
        self._instances.clear()
        logger.info("ProviderChain closed")
