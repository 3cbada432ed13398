"""Offline dictionary/phrase-table translator and the static emergency table.

``LocalSimulator`` is used when providers are skipped (offline mode, providers disabled, no
credentials) or have all failed. It never calls the network. ``fallback_translation`` is the last
tier: a static per-language greeting placeholder that cannot fail.
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any, Final, TypeAlias

from models.translation_models import ConfidenceLevel, TranslationResult, UsedSource
from utils.file_utils import FileUtils
from utils.logger_utils import LoggerUtils
from utils.string_utils import AUTO_LANGUAGE, KEY_SEPARATOR, StringUtils

if TYPE_CHECKING:
    import logging
    from pathlib import Path

__all__: list[str] = [
    "DEFAULT_DICTIONARIES",
    "DEFAULT_PHRASES",
    "EMERGENCY_PLACEHOLDERS",
    "LocalSimulator",
    "fallback_translation",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

LanguageTable: TypeAlias = dict[str, dict[str, str]]

DEFAULT_DICTIONARIES: Final[LanguageTable] = {
    "en:fr": {
        "hello": "bonjour",
        "world": "monde",
        "welcome": "bienvenue",
        "thank": "merci",
        "you": "vous",
        "good": "bon",
        "morning": "matin",
        "evening": "soir",
        "night": "nuit",
        "please": "s'il vous plaît",
        "yes": "oui",
        "no": "non",
        "goodbye": "au revoir",
        "help": "aide",
        "thanks": "merci",
        "today": "aujourd'hui",
        "tomorrow": "demain",
        "test": "test",
        "translation": "traduction",
    },
    "en:es": {
        "hello": "hola",
        "world": "mundo",
        "welcome": "bienvenido",
        "thank": "gracias",
        "you": "tú",
        "good": "bueno",
        "morning": "mañana",
        "evening": "tarde",
        "night": "noche",
        "please": "por favor",
        "yes": "sí",
        "no": "no",
        "goodbye": "adiós",
        "help": "ayuda",
        "thanks": "gracias",
        "today": "hoy",
        "tomorrow": "mañana",
        "test": "prueba",
        "translation": "traducción",
    },
    "en:de": {
        "hello": "hallo",
        "world": "welt",
        "welcome": "willkommen",
        "thank": "danke",
        "you": "du",
        "good": "gut",
        "morning": "morgen",
        "evening": "abend",
        "night": "nacht",
        "please": "bitte",
        "yes": "ja",
        "no": "nein",
        "goodbye": "auf wiedersehen",
        "help": "hilfe",
        "thanks": "danke",
        "today": "heute",
        "tomorrow": "morgen",
        "test": "test",
        "translation": "übersetzung",
    },
}

DEFAULT_PHRASES: Final[LanguageTable] = {
    "en:fr": {
        "hello world": "bonjour le monde",
        "thank you": "merci beaucoup",
        "how are you": "comment allez-vous",
        "good morning": "bonjour",
        "good evening": "bonsoir",
        "good night": "bonne nuit",
        "translation test": "test de traduction",
    },
    "en:es": {
        "hello world": "hola mundo",
        "thank you": "gracias",
        "how are you": "cómo estás",
        "good morning": "buenos días",
        "good evening": "buenas tardes",
        "good night": "buenas noches",
        "translation test": "prueba de traducción",
    },
    "en:de": {
        "hello world": "hallo welt",
        "thank you": "danke schön",
        "how are you": "wie geht es dir",
        "good morning": "guten morgen",
        "good evening": "guten abend",
        "good night": "gute nacht",
        "translation test": "übersetzungstest",
    },
}

EMERGENCY_PLACEHOLDERS: Final[dict[str, str]] = {
    "fr": "Bonjour",
    "es": "Hola",
    "de": "Hallo",
    "it": "Ciao",
    "pt": "Olá",
    "ja": "こんにちは",
    "zh": "你好",
    "ko": "안녕하세요",
    "ru": "Привет",
}


def fallback_translation(text: str, target_language: str) -> str:
    """Build the emergency placeholder for ``text``.

    Returns ``"{greeting} - {text}"`` for languages in the static table and ``"[{target}] {text}"``
    otherwise. Pure table lookup; cannot raise for string input.
    """
    placeholder: str | None = EMERGENCY_PLACEHOLDERS.get(target_language.lower())
    if placeholder:
        return f"{placeholder} - {text}"
    return f"[{target_language}] {text}"


class LocalSimulator:
    """Phrase-table and word-substitution translator.

    Resolution order for a language pair:

    1. same language after resolving ``auto``: input verbatim, HIGH
    2. exact (lower-cased, trimmed) phrase-table hit: HIGH
    3. whole-word dictionary substitution: confidence from word coverage
    4. nothing matched: ``"{text} ({target})"``, LOW, ``fallback=True``

    Args:
        default_source_language (str): Language assumed for ``auto`` sources.
        dictionaries (LanguageTable | None): Word tables keyed ``"src:tgt"``. Defaults to the built-in tables.
        phrases (LanguageTable | None): Phrase tables keyed ``"src:tgt"``. Defaults to the built-in tables.
    """

    def __init__(
        self,
        default_source_language: str = "en",
        dictionaries: LanguageTable | None = None,
        phrases: LanguageTable | None = None,
    ) -> None:
        self.default_source_language: str = StringUtils.normalize_language(default_source_language)
        self._dictionaries: LanguageTable = {}
        self._phrases: LanguageTable = {}
        self._patterns: dict[str, list[tuple[re.Pattern[str], str]]] = {}
        self.merge_tables(
            dictionaries if dictionaries is not None else DEFAULT_DICTIONARIES,
            phrases if phrases is not None else DEFAULT_PHRASES,
        )

    @property
    def language_pairs(self) -> list[str]:
        """Language pairs with at least one table."""
        return sorted(set(self._dictionaries) | set(self._phrases))

    def resolve_source(self, source_language: str | None) -> str:
        """Map ``auto`` (or an empty code) to the default source language."""
        code: str = StringUtils.normalize_language(source_language)
        return self.default_source_language if code == AUTO_LANGUAGE else code

    def merge_tables(self, dictionaries: LanguageTable, phrases: LanguageTable) -> None:
        """Merge word and phrase tables into the simulator, overriding existing entries.

        Keys are lower-cased; a pair key must look like ``"en:fr"``.

        Raises:
            ValueError: If a pair key is malformed.
        """
        for pair, words in dictionaries.items():
            key: str = self._validate_pair(pair)
            table: dict[str, str] = self._dictionaries.setdefault(key, {})
            table.update({str(src).strip().lower(): str(tgt) for src, tgt in words.items() if str(src).strip()})
            self._patterns[key] = [
                (re.compile(rf"\b{re.escape(src)}\b", re.IGNORECASE), tgt) for src, tgt in table.items()
            ]
        for pair, entries in phrases.items():
            key = self._validate_pair(pair)
            table = self._phrases.setdefault(key, {})
            table.update({str(src).strip().lower(): str(tgt) for src, tgt in entries.items() if str(src).strip()})

    def load_tables(self, path: str | Path) -> None:
        """Merge extra tables from a JSON file.

        The file maps ``"src:tgt"`` to ``{"words": {...}, "phrases": {...}}``.

        Raises:
            FileMissingError: If the file does not exist.
            UnsupportedFileFormatError: If the file is not ``.json``.
            ValueError: If the JSON content has the wrong shape.
        """
        file_path: Path = FileUtils.resolve_path(path)
        FileUtils.validate_file_path(file_path, ".json")
        with file_path.open(encoding="utf-8") as f:
            data: Any = json.load(f)
        if not isinstance(data, dict):
            msg: str = f"Dictionary file must contain a JSON object: {file_path}"
            raise ValueError(msg)  # noqa: TRY004

        dictionaries: LanguageTable = {}
        phrases: LanguageTable = {}
        for pair, tables in data.items():
            if not isinstance(tables, dict):
                msg = f"Entry for '{pair}' must be an object with 'words' and/or 'phrases'"
                raise ValueError(msg)  # noqa: TRY004
            dictionaries[pair] = dict(tables.get("words", {}))
            phrases[pair] = dict(tables.get("phrases", {}))
        self.merge_tables(dictionaries, phrases)
        logger.info("Loaded simulator tables for %d language pair(s) from '%s'", len(data), file_path)

    def translate(
        self, text: str, target_language: str, source_language: str | None = AUTO_LANGUAGE
    ) -> TranslationResult:
        """Translate ``text`` using only the local tables.

        Args:
            text (str): Text to translate.
            target_language (str): Target language code.
            source_language (str | None): Source language code; ``auto`` uses the default source.

        Returns:
            TranslationResult: ``used_source`` is always ``simulation``.
        """
        text = StringUtils.ensure_str(text)
        target: str = StringUtils.normalize_language(target_language)
        source: str = self.resolve_source(source_language)

        if source == target:
            return self._result(text, ConfidenceLevel.HIGH, fallback=False)

        pair: str = f"{source}{KEY_SEPARATOR}{target}"

        phrase: str | None = self._phrases.get(pair, {}).get(text.strip().lower())
        if phrase is not None:
            logger.debug("Phrase table hit for '%s' (%s)", text, pair)
            return self._result(phrase, ConfidenceLevel.HIGH, fallback=False)

        translated, matched = self._substitute_words(text, pair)
        if matched > 0:
            total_words: int = max(len(text.split()), 1)
            coverage: float = matched / total_words
            confidence: ConfidenceLevel = ConfidenceLevel.from_coverage(coverage)
            logger.debug(
                "Dictionary coverage %.2f (%d/%d) for %s -> %s", coverage, matched, total_words, pair, confidence
            )
            return self._result(translated, confidence, fallback=False)

        logger.debug("No local table match for %s", pair)
        return self._result(f"{text} ({target})", ConfidenceLevel.LOW, fallback=True)

    def _substitute_words(self, text: str, pair: str) -> tuple[str, int]:
        """Replace every whole-word dictionary hit.

        Matches are counted against the original text so a replacement cannot be matched again.

        Returns:
            tuple[str, int]: Substituted text and the number of matched words.
        """
        translated: str = text
        matched: int = 0
        for pattern, replacement in self._patterns.get(pair, []):
            hits: int = len(pattern.findall(text))
            if hits == 0:
                continue
            matched += hits
            translated = pattern.sub(lambda _m, r=replacement: r, translated)
        return translated, matched

    @staticmethod
    def _validate_pair(pair: str) -> str:
        key: str = str(pair).strip().lower()
        parts: list[str] = key.split(KEY_SEPARATOR)
        if len(parts) != 2 or not all(parts):  # noqa: PLR2004
            msg: str = f"Language pair must look like 'en:fr': '{pair}'"
            raise ValueError(msg)
        return key

    @staticmethod
    def _result(text: str, confidence: ConfidenceLevel, *, fallback: bool) -> TranslationResult:
        return TranslationResult(
            text=text,
            confidence=confidence,
            fallback=fallback,
            used_source=UsedSource.SIMULATION.value,
        )
