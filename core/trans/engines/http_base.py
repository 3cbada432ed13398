"""Shared base for adapters that talk to a REST endpoint through ``AsyncHttp``."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Final

from core.trans.interface import (
    ProviderNetworkError,
    ProviderResponseError,
    TransInterface,
    TranslateExceptionError,
    TranslationQuotaExceededError,
    TranslationRateLimitError,
)
from handlers.async_comm import AsyncCommError, AsyncCommInvalidContentTypeError, AsyncCommTimeoutError, AsyncHttp
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config

__all__: list[str] = ["HttpTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTP_TOO_MANY_REQUESTS: Final[int] = 429
# 403 is used by Microsoft for exhausted free-tier quota; 456 is the DeepL-style quota status some
# LibreTranslate mirrors copy.
QUOTA_STATUSES: Final[frozenset[int]] = frozenset({403, 456})


class HttpTranslation(TransInterface):
    """Adapter base owning one ``AsyncHttp`` client.

    Subclasses implement ``_send`` (one request, return the decoded payload) and ``_extract``
    (pull the translated string out of it). Transport and status errors are mapped here.
    """

    def __init__(self) -> None:
        super().__init__()
        self.__http: AsyncHttp | None = None
        self.timeout: float = 10.0

    @staticmethod
    def fetch_engine_name() -> str:
        return ""

    @property
    def http(self) -> AsyncHttp:
        if self.__http is None:
            msg: str = f"The HTTP client of '{self.engine_name}' is not initialised"
            raise TranslateExceptionError(msg)
        return self.__http

    def initialize(self, config: Config) -> None:
        self.timeout = config.TRANSLATION.PROVIDER_TIMEOUT
        self.__http = AsyncHttp()
        self._initialized = True
        self.configure(config)
        logger.debug("'%s' initialized", self.__class__.__name__)

    def configure(self, config: Config) -> None:
        """Hook for subclasses to read their endpoint settings."""
        _ = config

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> str:
        logger.debug("'content': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", content, src_lang, tgt_lang)
        try:
            payload: Any = await self._send(content, tgt_lang, src_lang)
        except AsyncCommTimeoutError as err:
            msg: str = f"{self.engine_name} did not answer in time"
            raise ProviderNetworkError(msg) from err
        except AsyncCommInvalidContentTypeError as err:
            msg = f"{self.engine_name} returned an unreadable response: {err}"
            raise ProviderResponseError(msg) from err
        except AsyncCommError as err:
            raise self._map_comm_error(err) from err

        try:
            text: str = self._extract(payload)
        except (KeyError, IndexError, TypeError, AttributeError) as err:
            msg = f"{self.engine_name} response is missing the translation field: {payload!r}"
            raise ProviderResponseError(msg) from err

        logger.info("translation completed (%s > %s) by '%s'", src_lang or "auto", tgt_lang, self.engine_name)
        return self.require_text(text, self.engine_name)

    def _map_comm_error(self, err: AsyncCommError) -> TranslateExceptionError:
        if err.status is None:
            return ProviderNetworkError(f"{self.engine_name} is unreachable: {err}")
        if err.status == HTTP_TOO_MANY_REQUESTS:
            return TranslationRateLimitError(f"{self.engine_name} rate limit reached: {err}")
        if err.status in QUOTA_STATUSES:
            return TranslationQuotaExceededError(f"{self.engine_name} quota exceeded: {err}")
        return ProviderResponseError(f"{self.engine_name} returned an error: {err}")

    @abstractmethod
    async def _send(self, content: str, tgt_lang: str, src_lang: str | None) -> Any:
        raise NotImplementedError

    @abstractmethod
    def _extract(self, payload: Any) -> str:
        raise NotImplementedError

    async def close(self) -> None:
        if self.__http is not None:
            await self.__http.close()
        self.__http = None
        self._initialized = False
        logger.debug("'%s' process termination", self.__class__.__name__)
