"""Google Cloud Translation API Basic (v2) adapter.

Uses the google-cloud-translate client with an API key injected through a custom HTTP session.
ISO language codes are passed through unchanged.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from google.api_core.exceptions import BadRequest, Forbidden, GoogleAPIError, TooManyRequests, Unauthorized
from google.auth.credentials import AnonymousCredentials
from google.auth.exceptions import TransportError
from google.auth.transport.requests import AuthorizedSession
from google.cloud import translate_v2 as translate

from core.trans.interface import (
    NotSupportedLanguagesError,
    ProviderNetworkError,
    ProviderResponseError,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config

__all__: list[str] = ["APIKeySession", "GoogleCloudTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class APIKeySession:
    """HTTP session that appends the API key to every request URL."""

    def __init__(self, api_key: str) -> None:
        self.api_key: str = api_key
        self._session: AuthorizedSession = AuthorizedSession(AnonymousCredentials())

    def request(self, method: str, url: str, **kwargs):
        separator = "&" if "?" in url else "?"
        return self._session.request(method, f"{url}{separator}key={self.api_key}", **kwargs)


class GoogleCloudTranslation(TransInterface):
    """Google Cloud Translation v2 adapter.

    The key is read from ``GOOGLE_API_OAUTH``. Blocking client calls run in a worker thread.
    """

    def __init__(self) -> None:
        super().__init__()
        self.__inst: translate.Client | None = None

    @property
    def _inst(self) -> translate.Client:
        if self.__inst is None:
            msg = "The Google Cloud Translate instance is not initialised"
            raise TranslateExceptionError(msg)
        return self.__inst

    @_inst.setter
    def _inst(self, inst: translate.Client | None) -> None:
        self.__inst = inst
        self._initialized = inst is not None

    @staticmethod
    def fetch_engine_name() -> str:
        return "google"

    def initialize(self, config: Config) -> None:
        """Build the v2 client on top of an ``APIKeySession``; no OAuth flow is involved.

        Raises:
            RuntimeError: The client could not be built.
        """
        _ = config
        try:
            self._inst = translate.Client(
                credentials=AnonymousCredentials(), _http=APIKeySession(self.get_authentication_key())
            )
        except (ValueError, TypeError, GoogleAPIError) as err:
            logger.critical("Google Cloud Translation client could not be built: %s", err)
            msg: str = f"Failed to initialize Google Cloud Translation client: {err}"
            raise RuntimeError(msg) from err
        logger.debug("Google Cloud Translation client ready")

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> str:
        """Translate plain ``content``; ISO codes are accepted by the API as they are.

        Raises:
            NotSupportedLanguagesError: The API answered 400 for the pair.
            TranslationRateLimitError: Throttled (429).
            ProviderNetworkError: Transport failure before an answer arrived.
            ProviderResponseError: Any other API failure, or no usable text.
        """
        logger.debug("Google request %s > %s: '%s'", src_lang or "auto", tgt_lang, content)
        try:
            response: Any = await asyncio.to_thread(
                self._inst.translate, content, target_language=tgt_lang, source_language=src_lang, format_="text"
            )
        except (GoogleAPIError, TransportError, OSError) as err:
            raise self._map_api_error(err, tgt_lang, src_lang) from err

        # a single string yields one dict, a list of strings a list of dicts
        if isinstance(response, list):
            response = response[0] if response else None
        if not isinstance(response, dict):
            msg = "Unexpected response from Google Cloud Translation"
            raise ProviderResponseError(msg)

        logger.info(
            "translation completed (%s > %s)", src_lang or response.get("detectedSourceLanguage", "auto"), tgt_lang
        )
        return self.require_text(response.get("translatedText"), "Google Cloud Translation")

    @staticmethod
    def _map_api_error(err: Exception, tgt_lang: str, src_lang: str | None) -> TranslateExceptionError:
        if isinstance(err, BadRequest):
            return NotSupportedLanguagesError(f"Google rejected the pair ({src_lang or 'auto'} > {tgt_lang}): {err}")
        if isinstance(err, TooManyRequests):
            return TranslationRateLimitError(f"Google Cloud Translation rate limit reached: {err}")
        if isinstance(err, (Unauthorized, Forbidden)):
            return ProviderResponseError(f"Google rejected the API key: {err}")
        if isinstance(err, GoogleAPIError):
            return ProviderResponseError(f"Google Cloud Translation failed: {err}")
        return ProviderNetworkError(f"Google Cloud Translation is unreachable: {err}")

    async def close(self) -> None:
        self._inst = None
        logger.debug("Google Cloud Translation client released")
