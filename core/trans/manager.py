# ruff: noqa: BLE001
"""Translation resolution engine.

Coordinates the LRU cache, the translation memory, the provider chain, the local simulator and the
emergency table. ``resolve`` always returns a ``TranslationResult``; failures surface as
``fallback=True`` with a populated ``error``.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from core.cache.inflight_manager import InFlightManager
from core.cache.lru_cache import LRUTranslationCache
from core.cache.memory import TranslationMemory
from core.offline_mode import OfflineModeManager
from core.state_storage import StateStorage
from core.trans.chain import ProviderChain
from core.trans.engines import (
    DeeplTranslation,  # noqa: F401
    GoogleCloudTranslation,  # noqa: F401
    LibreTranslation,  # noqa: F401
    MicrosoftTranslation,  # noqa: F401
)
from core.trans.interface import AllProvidersFailedError, NoProvidersConfiguredError
from core.trans.simulator import LocalSimulator, fallback_translation
from models.translation_models import (
    ConfidenceLevel,
    TranslationOptions,
    TranslationRequest,
    TranslationResult,
    UsedSource,
)
from utils.file_utils import FileUtilsError
from utils.logger_utils import LoggerUtils
from utils.string_utils import AUTO_LANGUAGE, StringUtils

if TYPE_CHECKING:
    import logging
    from pathlib import Path

    from config.loader import Config
    from models.cache_models import CacheStats, MemoryEntry, MemoryStatistics


__all__: list[str] = ["ResolutionEngine"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class ResolutionEngine:
    """Resolves translation requests through the cache, memory, provider and simulator tiers.

    Collaborators default to instances built from ``config`` and can be replaced, which is how tests
    inject recording providers or in-memory stores.

    Args:
        config (Config): Resolver configuration.
        cache (LRUTranslationCache | None): In-memory result cache.
        memory (TranslationMemory | None): Persistent translation memory.
        chain (ProviderChain | None): Provider chain.
        simulator (LocalSimulator | None): Local dictionary translator.
        offline_manager (OfflineModeManager | None): Offline flag holder.
        inflight_manager (InFlightManager | None): Request coalescer; None disables coalescing unless
            ``CACHE.COALESCE_REQUESTS`` asks for the default one.
    """

    def __init__(
        self,
        config: Config,
        *,
        cache: LRUTranslationCache | None = None,
        memory: TranslationMemory | None = None,
        chain: ProviderChain | None = None,
        simulator: LocalSimulator | None = None,
        offline_manager: OfflineModeManager | None = None,
        inflight_manager: InFlightManager | None = None,
    ) -> None:
        self.config: Config = config
        self.default_source_language: str = StringUtils.normalize_language(
            config.TRANSLATION.DEFAULT_SOURCE_LANGUAGE
        )
        self._state_storage: StateStorage | None = None

        self.cache: LRUTranslationCache = cache if cache is not None else LRUTranslationCache(config.CACHE.CAPACITY)
        self.memory: TranslationMemory = memory if memory is not None else TranslationMemory(config.MEMORY.DB_PATH)
        self.chain: ProviderChain = chain if chain is not None else ProviderChain(config)
        self.simulator: LocalSimulator = (
            simulator if simulator is not None else LocalSimulator(self.default_source_language)
        )
        if offline_manager is None:
            self._state_storage = StateStorage(config.MEMORY.DB_PATH)
            offline_manager = OfflineModeManager(self._state_storage)
        self.offline_manager: OfflineModeManager = offline_manager
        if inflight_manager is None and config.CACHE.COALESCE_REQUESTS:
            inflight_manager = InFlightManager(config.CACHE.INFLIGHT_TIMEOUT)
        self.inflight_manager: InFlightManager | None = inflight_manager
        self._is_initialized: bool = False

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    async def initialize(self) -> None:
        """Open the memory, restore offline state, load extra dictionaries and build the providers."""
        logger.info("ResolutionEngine initialization started")
        await self.memory.component_load()
        self.offline_manager.load()

        if self.config.SIMULATOR.DICTIONARY_FILE:
            try:
                self.simulator.load_tables(self.config.SIMULATOR.DICTIONARY_FILE)
            except (FileUtilsError, OSError, ValueError) as err:
                logger.error("Failed to load simulator dictionary file: %s", err)

        if self.config.TRANSLATION.ENABLE_PROVIDERS:
            self.chain.initialize()
        else:
            logger.info("Network providers are disabled; the local simulator will be used")

        if self.inflight_manager is not None:
            await self.inflight_manager.component_load()

        self._is_initialized = True
        logger.info("ResolutionEngine initialized successfully")

    async def close(self) -> None:
        """Release providers and storage."""
        logger.info("ResolutionEngine shutdown started")
        await self.chain.close()
        if self.inflight_manager is not None:
            await self.inflight_manager.component_teardown()
        await self.memory.component_teardown()
        if self._state_storage is not None:
            self._state_storage.close()
        self._is_initialized = False
        logger.info("ResolutionEngine shutdown completed")

    async def translate(
        self,
        text: str,
        target_language: str,
        source_language: str = AUTO_LANGUAGE,
        options: TranslationOptions | None = None,
    ) -> TranslationResult:
        """Build a request and resolve it. Never raises."""
        return await self.resolve(TranslationRequest.create(text, target_language, source_language, options))

    async def resolve(self, request: TranslationRequest) -> TranslationResult:
        """Resolve ``request`` to a translation. Never raises.

        Args:
            request (TranslationRequest): The request to resolve.

        Returns:
            TranslationResult: The translation, or a degraded result carrying ``error``.
        """
        try:
            return await self._resolve(request)
        except Exception as err:
            logger.critical("Unexpected error while resolving a translation: %s", err, exc_info=True)
            return self._emergency(request, f"Unexpected error: {type(err).__name__}: {err}")

    async def _resolve(self, request: TranslationRequest) -> TranslationResult:
        text: str = request.text
        if StringUtils.is_blank(text):
            return TranslationResult.identity(text)

        if self._resolve_source(request.source_language) == request.target_language:
            return TranslationResult.identity(text)

        key: str = request.cache_key
        options: TranslationOptions = request.options

        if not options.skip_cache:
            cached: TranslationResult | None = self.cache.get(key)
            if cached is not None:
                return cached.copy_with(from_cache=True)

        offline: bool = (
            options.offline_mode_override
            if options.offline_mode_override is not None
            else self.offline_manager.is_offline
        )

        if not options.skip_memory:
            entry: MemoryEntry | None = await self.memory.lookup(key)
            if entry is not None:
                result: TranslationResult = TranslationResult(
                    text=entry.translation,
                    confidence=entry.confidence,
                    fallback=False,
                    used_source=UsedSource.MEMORY.value,
                    from_memory=True,
                )
                self.cache.set(key, result)
                return result

        if self.inflight_manager is None:
            return await self._resolve_uncached(request, key, offline=offline)
        return await self._resolve_coalesced(self.inflight_manager, request, key, offline=offline)

    async def _resolve_coalesced(
        self, inflight_manager: InFlightManager, request: TranslationRequest, key: str, *, offline: bool
    ) -> TranslationResult:
        """Share one resolution between identical concurrent requests."""
        inflight_key: str = f"{'offline' if offline else 'online'}|{key}"
        try:
            shared: TranslationResult | None = await inflight_manager.mark_inflight_start(inflight_key)
        except TimeoutError as err:
            logger.warning("%s; resolving independently", err)
            return await self._resolve_uncached(request, key, offline=offline)

        if shared is not None:
            return shared

        try:
            result: TranslationResult = await self._resolve_uncached(request, key, offline=offline)
        except Exception as err:
            await inflight_manager.store_inflight_exception(inflight_key, err)
            raise
        except asyncio.CancelledError:
            # followers fall back to resolving on their own instead of waiting out the timeout
            msg: str = f"In-flight translation cancelled for key: {inflight_key[:32]}"
            await inflight_manager.store_inflight_exception(inflight_key, TimeoutError(msg))
            raise
        await inflight_manager.store_inflight_result(inflight_key, result)
        return result

    async def _resolve_uncached(self, request: TranslationRequest, key: str, *, offline: bool) -> TranslationResult:
        skip_reason: str = ""
        if offline:
            skip_reason = "offline mode"
        elif not self.config.TRANSLATION.ENABLE_PROVIDERS:
            skip_reason = "providers disabled"
        elif not self.chain.has_available_providers:
            skip_reason = "no credentialed providers"

        if skip_reason:
            logger.debug("Provider path skipped (%s)", skip_reason)
            return self._simulate(request, key, failure="")

        try:
            result: TranslationResult = await self.chain.resolve(
                request.text, request.target_language, request.source_language
            )
        except NoProvidersConfiguredError as err:
            logger.info("%s", err)
            return self._simulate(request, key, failure="")
        except AllProvidersFailedError as err:
            logger.error("%s", err)
            return self._simulate(request, key, failure=str(err))

        self.cache.set(key, result)
        if result.is_promotable:
            await self.memory.promote(key, result.text, result.confidence)
        return result

    def _simulate(self, request: TranslationRequest, key: str, *, failure: str) -> TranslationResult:
        """Run the local simulator; ``failure`` is set when providers were tried and all failed."""
        try:
            result: TranslationResult = self.simulator.translate(
                request.text, request.target_language, request.source_language
            )
        except Exception as err:
            logger.error("Local simulator failed: %s", err)
            return self._emergency(request, failure or f"Local simulator failed: {type(err).__name__}: {err}")

        if failure:
            result = result.copy_with(fallback=True, error=failure)
        self.cache.set(key, result)
        return result

    @staticmethod
    def _emergency(request: TranslationRequest, error: str) -> TranslationResult:
        logger.critical("Emergency translation used for target '%s'", request.target_language)
        return TranslationResult(
            text=fallback_translation(request.text, request.target_language),
            confidence=ConfidenceLevel.LOW,
            fallback=True,
            used_source=UsedSource.EMERGENCY.value,
            error=error or "Emergency fallback",
        )

    def _resolve_source(self, source_language: str) -> str:
        return self.default_source_language if source_language == AUTO_LANGUAGE else source_language

    async def promote(
        self,
        text: str,
        translation: str,
        source_language: str,
        target_language: str,
        confidence: ConfidenceLevel = ConfidenceLevel.HIGH,
    ) -> bool:
        """Record an approved translation in the memory and the cache.

        Used when a user corrects or approves a translation.

        Returns:
            bool: True if the memory write succeeded.
        """
        if StringUtils.is_blank(text) or StringUtils.is_blank(translation):
            logger.warning("Refusing to promote an empty text or translation")
            return False

        key: str = TranslationRequest.create(text, target_language, source_language).cache_key
        level: ConfidenceLevel = ConfidenceLevel.parse(confidence)
        stored: bool = await self.memory.promote(key, translation, level)
        self.cache.set(
            key,
            TranslationResult(
                text=translation,
                confidence=level,
                fallback=False,
                used_source=UsedSource.MEMORY.value,
                from_memory=True,
            ),
        )
        return stored

    def set_offline_mode(self, mode: bool) -> None:  # noqa: FBT001
        self.offline_manager.set_offline_mode(mode)

    def get_offline_mode(self) -> bool:
        return self.offline_manager.is_offline

    def notify_network_status(self, is_online: bool) -> bool:  # noqa: FBT001
        """Forward a network status change; ignored while a manual offline choice is latched."""
        return self.offline_manager.notify_network_status(is_online)

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    async def clear_memory(self) -> bool:
        return await self.memory.clear()

    async def memory_stats(self) -> MemoryStatistics:
        return await self.memory.get_statistics()

    async def export_memory(self, output_path: Path) -> int:
        return await self.memory.export_entries(output_path)
