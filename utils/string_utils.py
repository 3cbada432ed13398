from __future__ import annotations

import unicodedata
from typing import Final

__all__: list[str] = ["StringUtils"]

AUTO_LANGUAGE: Final[str] = "auto"
KEY_SEPARATOR: Final[str] = ":"


class StringUtils:
    """String helpers shared by the cache, memory and simulator layers."""

    @staticmethod
    def ensure_str(value: str | None) -> str:
        """Return ``value`` as a string; None becomes an empty string.

        Whitespace is preserved so that the caller's text reaches providers unchanged.
        """
        if not isinstance(value, str):
            value = str(value) if value is not None else ""
        return value

    @staticmethod
    def is_blank(value: str | None) -> bool:
        """Return True for None, empty or whitespace-only text."""
        return not StringUtils.ensure_str(value).strip()

    @staticmethod
    def normalize_language(code: str | None) -> str:
        """Lower-case and trim a language code; empty input becomes ``auto``.

        Args:
            code (str | None): Raw language code, e.g. ``"EN"`` or ``" fr "``.

        Returns:
            str: Normalized code.
        """
        value: str = StringUtils.ensure_str(code).strip().lower()
        return value or AUTO_LANGUAGE

    @staticmethod
    def normalize_text(text: str) -> str:
        """Apply Unicode NFC normalization so visually equal strings share a key."""
        return unicodedata.normalize("NFC", text)

    @staticmethod
    def build_cache_key(text: str, source_language: str, target_language: str) -> str:
        """Build the ``source:target:text`` key used by both the LRU cache and the translation memory.

        Args:
            text (str): Source text.
            source_language (str): Source language code (may be ``auto``).
            target_language (str): Target language code.

        Returns:
            str: The composed key.
        """
        return KEY_SEPARATOR.join((source_language, target_language, StringUtils.normalize_text(text)))

    @staticmethod
    def split_cache_key(key: str) -> tuple[str, str, str]:
        """Split a cache key back into ``(source, target, text)``.

        The text part may itself contain the separator; only the first two separators are significant.

        Raises:
            ValueError: If the key does not contain two separators.
        """
        parts: list[str] = key.split(KEY_SEPARATOR, 2)
        if len(parts) != 3:  # noqa: PLR2004
            msg: str = f"Malformed cache key: '{key}'"
            raise ValueError(msg)
        return parts[0], parts[1], parts[2]
