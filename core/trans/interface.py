"""This module defines the abstract base class for translation provider adapters and related exceptions.

Every adapter performs exactly one vendor request per call and either returns a non-empty translated
string or raises one of the ``TranslateExceptionError`` subclasses below.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config

__all__: list[str] = [
    "AllProvidersFailedError",
    "NoProvidersConfiguredError",
    "NotSupportedLanguagesError",
    "ProviderNetworkError",
    "ProviderResponseError",
    "TransInterface",
    "TranslateExceptionError",
    "TranslationQuotaExceededError",
    "TranslationRateLimitError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class TranslateExceptionError(Exception):
    """An error occurred during the translation process."""


class ProviderNetworkError(TranslateExceptionError):
    """The provider could not be reached (connection failure, timeout, transport error)."""


class ProviderResponseError(TranslateExceptionError):
    """The provider answered with an error status or a payload without a usable translation."""


class NotSupportedLanguagesError(ProviderResponseError):
    """An unsupported language code was specified."""


class TranslationQuotaExceededError(ProviderResponseError):
    """The translatable character quota has been exceeded."""


class TranslationRateLimitError(ProviderNetworkError):
    """The translation request was rate-limited by the API."""


class NoProvidersConfiguredError(TranslateExceptionError):
    """No provider in the priority list has credentials, so nothing can be called."""


class AllProvidersFailedError(TranslateExceptionError):
    """Every credentialed provider was tried and none returned a translation.

    Attributes:
        failures (list[tuple[str, str]]): ``(provider name, reason)`` in the order providers were tried.
    """

    def __init__(self, failures: list[tuple[str, str]]) -> None:
        self.failures: list[tuple[str, str]] = list(failures)
        detail: str = "; ".join(f"{name}: {reason}" for name, reason in self.failures) or "no provider attempted"
        super().__init__(f"All translation providers failed: {detail}")


class TransInterface(ABC):
    """Abstract base class for translation provider adapters.

    Subclasses are registered automatically under their ``fetch_engine_name()`` so that the provider
    chain can build them from the configured priority list.

    Attributes:
        registered (ClassVar[dict[str, type[TransInterface]]]): Registered adapter classes keyed by name.
        requires_credentials (ClassVar[bool]): Whether the adapter is skipped when no key is configured.
    """

    registered: ClassVar[dict[str, type[TransInterface]]] = {}
    requires_credentials: ClassVar[bool] = True

    def __init_subclass__(cls, **kwargs) -> None:
        """Register the subclass under its distinguished name.

        Raises:
            TypeError: If the subclass does not provide ``fetch_engine_name``.
            ValueError: If the name is already registered by another class.
        """
        super().__init_subclass__(**kwargs)
        if not hasattr(cls, "fetch_engine_name") or not callable(cls.fetch_engine_name):
            msg = "Subclasses of TransInterface must implement the static method fetch_engine_name()."
            raise TypeError(msg)

        name: object = cls.fetch_engine_name()
        if not isinstance(name, str) or name == "":
            return  # Unnamed adapters are allowed but never registered.

        if name in cls.registered and cls.registered[name] is not cls:
            msg: str = f"A translation engine with the name '{name}' is already registered."
            raise ValueError(msg)

        cls.registered[name] = cls

    def __init__(self) -> None:
        self._initialized: bool = False

    @property
    def engine_name(self) -> str:
        return self.fetch_engine_name()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def has_credentials(self) -> bool:
        """Whether the adapter can be called: keyless adapters always can."""
        return not self.requires_credentials or bool(self.get_authentication_key())

    @staticmethod
    @abstractmethod
    def fetch_engine_name() -> str:
        """Fetch the distinguished name of the provider.

        Called during class registration in ``__init_subclass__``, so the implementation must be
        available at subclass definition time.

        Returns:
            str: Provider name as used in the priority list.
        """
        raise NotImplementedError

    @abstractmethod
    def initialize(self, config: Config) -> None:
        """Prepare the adapter (clients, endpoints) from configuration.

        Args:
            config (Config): Resolver configuration.

        Raises:
            RuntimeError: If the vendor client cannot be created.
            TranslateExceptionError: If the credentials are rejected up front.
        """
        raise NotImplementedError

    @abstractmethod
    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> str:
        """Translate ``content`` with exactly one vendor request.

        Args:
            content (str): Text to translate.
            tgt_lang (str): Target language code (ISO, lower case).
            src_lang (str | None): Source language code. None lets the vendor detect it.

        Returns:
            str: Non-empty translated text.

        Raises:
            NotSupportedLanguagesError: If the vendor cannot map a language code.
            ProviderResponseError: If the vendor answers with an error status or an empty/malformed payload.
            ProviderNetworkError: If the vendor cannot be reached.
        """
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Release vendor clients and sessions."""
        raise NotImplementedError

    def get_authentication_key(self) -> str:
        """Retrieve the credential from the environment.

        The variable is named after the provider with the suffix ``_API_OAUTH``; for example
        ``DEEPL_API_OAUTH`` for the ``deepl`` provider.

        Returns:
            str: The key, or an empty string if the variable is not set.
        """
        return os.getenv(f"{self.fetch_engine_name().upper()}_API_OAUTH", "").strip()

    @staticmethod
    def require_text(value: object, provider: str) -> str:
        """Return ``value`` if it is a non-empty string, otherwise raise.

        Raises:
            ProviderResponseError: If the vendor payload did not contain a translation.
        """
        if not isinstance(value, str) or not value.strip():
            msg: str = f"{provider} returned an empty translation"
            raise ProviderResponseError(msg)
        return value
