"""DeepL adapter built on the official ``deepl`` SDK.

The SDK is synchronous, so calls run in a worker thread. Language codes are translated from ISO
form to DeepL's upper-case codes with tables derived from ``deepl.Language``.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, ClassVar, Final

from deepl import DeepLClient, Language, TextResult
from deepl.exceptions import (
    AuthorizationException,
    ConnectionException,
    DeepLException,
    QuotaExceededException,
    TooManyRequestsException,
)

from core.trans.interface import (
    NotSupportedLanguagesError,
    ProviderNetworkError,
    ProviderResponseError,
    TransInterface,
    TranslateExceptionError,
    TranslationQuotaExceededError,
    TranslationRateLimitError,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config


__all__: list[str] = ["DeeplTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

# Bare "EN" and "PT" are refused as targets.
REGIONAL_TARGETS: Final[dict[str, str]] = {"en": "EN-US", "pt": "PT-BR"}
CHINESE_VARIANTS: Final[tuple[str, ...]] = ("zh-cn", "zh-tw")

# Order matters: the SDK exceptions below all derive from DeepLException.
SDK_ERRORS: Final[tuple[tuple[type[Exception], type[TranslateExceptionError], str], ...]] = (
    (QuotaExceededException, TranslationQuotaExceededError, "DeepL character quota exhausted"),
    (TooManyRequestsException, TranslationRateLimitError, "DeepL rate limit reached"),
    (AuthorizationException, ProviderResponseError, "DeepL refused the authentication key"),
    (ConnectionException, ProviderNetworkError, "DeepL server could not be reached"),
    (DeepLException, ProviderResponseError, "DeepL failed to translate"),
    (ValueError, ProviderResponseError, "DeepL rejected the request"),
    (TypeError, ProviderResponseError, "DeepL rejected the request"),
)


class DeeplTranslation(TransInterface):
    _source_codes: ClassVar[dict[str, str]] = {}
    _target_codes: ClassVar[dict[str, str]] = {}

    def __init__(self) -> None:
        super().__init__()
        self.__inst: DeepLClient | None = None
        self._build_code_tables()

    @classmethod
    def _build_code_tables(cls) -> None:
        """Fill the ISO -> DeepL tables once per process.

        Sources use the bare upper-case language; targets keep the SDK's regional code unless
        ``REGIONAL_TARGETS`` names one. Both Chinese variants map to ``ZH``.
        """
        if cls._source_codes and cls._target_codes:
            return

        sdk_codes: list[str] = [
            value for name, value in vars(Language).items() if name.isupper() and isinstance(value, str)
        ]
        for sdk_code in sdk_codes:
            iso: str = sdk_code.partition("-")[0].lower()
            cls._source_codes[iso] = iso.upper()
            cls._target_codes.setdefault(iso, sdk_code.upper())

        cls._target_codes.update({iso: code for iso, code in REGIONAL_TARGETS.items() if iso in cls._source_codes})
        for variant in CHINESE_VARIANTS:
            cls._source_codes[variant] = cls._target_codes[variant] = "ZH"

        logger.debug("DeepL code tables: %d sources, %d targets", len(cls._source_codes), len(cls._target_codes))

    @property
    def _inst(self) -> DeepLClient:
        if self.__inst is None:
            msg = "The DeepL client is not initialised"
            raise TranslateExceptionError(msg)
        return self.__inst

    @_inst.setter
    def _inst(self, inst: DeepLClient | None) -> None:
        self.__inst = inst
        self._initialized = inst is not None

    @staticmethod
    def fetch_engine_name() -> str:
        return "deepl"

    def initialize(self, config: Config) -> None:
        """Build the SDK client; the key is only checked by DeepL on the first request.

        Raises:
            RuntimeError: The SDK refused to build a client (e.g. malformed key).
        """
        server_url: str | None = config.PROVIDERS.DEEPL_SERVER_URL or None
        try:
            self._inst = DeepLClient(self.get_authentication_key(), server_url=server_url)
        except (AttributeError, ValueError) as err:
            logger.critical("DeepL client could not be built: %s", err)
            msg = "An error occurred while creating the DeepL client instance"
            raise RuntimeError(msg) from err
        logger.debug("DeepL client ready (server_url=%s)", server_url or "default")

    def map_language(self, tgt_lang: str, src_lang: str | None) -> tuple[str, str | None]:
        """Return ``(target, source)`` in DeepL codes; a None source means auto-detect.

        Raises:
            NotSupportedLanguagesError: Either code is unknown to DeepL.
        """
        target: str | None = self._target_codes.get(tgt_lang.lower())
        source: str | None = self._source_codes.get(src_lang.lower()) if src_lang else None
        if target is None or (src_lang and source is None):
            msg: str = f"Languages not supported by DeepL (source: '{src_lang}', target: '{tgt_lang}')"
            raise NotSupportedLanguagesError(msg)
        return target, source

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> str:
        """Translate ``content`` through DeepL.

        Raises:
            NotSupportedLanguagesError: The pair has no DeepL codes.
            TranslationQuotaExceededError: Character quota exhausted.
            TranslationRateLimitError: Throttled by DeepL.
            ProviderNetworkError: DeepL unreachable.
            ProviderResponseError: Any other failure, or an empty result.
        """
        target, source = self.map_language(tgt_lang, src_lang)
        logger.debug("DeepL request %s > %s: '%s'", source or "auto", target, content)

        try:
            results: TextResult | list[TextResult] = await asyncio.to_thread(
                self._inst.translate_text, content, source_lang=source, target_lang=target
            )
        except (DeepLException, ValueError, TypeError) as err:
            raise self._map_sdk_error(err) from err

        if isinstance(results, list):
            results = results[0] if results else None
        if not isinstance(results, TextResult):
            msg = "Unexpected response from DeepL"
            raise ProviderResponseError(msg)

        logger.info("translation completed (%s > %s)", source or "auto", target)
        return self.require_text(results.text, "DeepL")

    @staticmethod
    def _map_sdk_error(err: Exception) -> TranslateExceptionError:
        for sdk_type, mapped, summary in SDK_ERRORS:
            if isinstance(err, sdk_type):
                return mapped(f"{summary}: {err}")
        return ProviderResponseError(f"DeepL failed to translate: {err}")

    async def close(self) -> None:
        self._inst = None
        logger.debug("DeepL client released")
