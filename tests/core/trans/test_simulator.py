from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from core.trans.simulator import LocalSimulator, fallback_translation
from models.translation_models import ConfidenceLevel, TranslationResult
from utils.file_utils import UnsupportedFileFormatError

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def simulator() -> LocalSimulator:
    return LocalSimulator()


def test_phrase_hit_is_high_confidence(simulator: LocalSimulator) -> None:
    result: TranslationResult = simulator.translate("hello world", "fr", "en")

    assert result == TranslationResult(
        text="bonjour le monde", confidence=ConfidenceLevel.HIGH, fallback=False, used_source="simulation"
    )


def test_phrase_lookup_ignores_case_and_surrounding_space(simulator: LocalSimulator) -> None:
    result: TranslationResult = simulator.translate("  Good Night ", "de", "en")

    assert result.text == "gute nacht"
    assert result.confidence is ConfidenceLevel.HIGH


def test_partial_dictionary_coverage_is_low(simulator: LocalSimulator) -> None:
    result: TranslationResult = simulator.translate("hello there friend", "fr", "en")

    assert result.text == "bonjour there friend"
    assert result.confidence is ConfidenceLevel.LOW
    assert result.fallback is False


def test_medium_and_high_coverage(simulator: LocalSimulator) -> None:
    medium: TranslationResult = simulator.translate("welcome and goodbye", "es", "en")
    high: TranslationResult = simulator.translate("yes please", "de", "en")

    assert medium.text == "bienvenido and adiós"
    assert medium.confidence is ConfidenceLevel.MEDIUM
    assert high.text == "ja bitte"
    assert high.confidence is ConfidenceLevel.HIGH


def test_word_substitution_respects_word_boundaries(simulator: LocalSimulator) -> None:
    result: TranslationResult = simulator.translate("Hello helloworld", "fr", "en")

    assert result.text == "bonjour helloworld"
    assert result.confidence is ConfidenceLevel.MEDIUM


def test_no_match_returns_tagged_input(simulator: LocalSimulator) -> None:
    result: TranslationResult = simulator.translate("xyzzy plugh", "fr", "en")

    assert result == TranslationResult(
        text="xyzzy plugh (fr)", confidence=ConfidenceLevel.LOW, fallback=True, used_source="simulation"
    )


def test_unknown_language_pair_falls_back(simulator: LocalSimulator) -> None:
    result: TranslationResult = simulator.translate("hello", "ja", "en")

    assert result.text == "hello (ja)"
    assert result.fallback is True


def test_auto_source_uses_default_language(simulator: LocalSimulator) -> None:
    assert simulator.translate("thank you", "es", "auto").text == "gracias"
    assert simulator.translate("anything", "en", "auto").confidence is ConfidenceLevel.HIGH


def test_same_language_returns_input(simulator: LocalSimulator) -> None:
    result: TranslationResult = simulator.translate("Bonjour", "fr", "fr")

    assert result.text == "Bonjour"
    assert result.confidence is ConfidenceLevel.HIGH
    assert result.fallback is False


def test_load_tables_merges_json_file(simulator: LocalSimulator, tmp_path: Path) -> None:
    table_file: Path = tmp_path / "extra.json"
    table_file.write_text(
        json.dumps(
            {
                "en:it": {"words": {"hello": "ciao"}, "phrases": {"good morning": "buongiorno"}},
                "en:fr": {"words": {"cat": "chat"}},
            }
        ),
        encoding="utf-8",
    )

    simulator.load_tables(table_file)

    assert simulator.translate("good morning", "it", "en").text == "buongiorno"
    assert simulator.translate("hello cat", "fr", "en").text == "bonjour chat"
    assert "en:it" in simulator.language_pairs


def test_load_tables_rejects_wrong_suffix(simulator: LocalSimulator, tmp_path: Path) -> None:
    table_file: Path = tmp_path / "extra.txt"
    table_file.write_text("{}", encoding="utf-8")

    with pytest.raises(UnsupportedFileFormatError):
        simulator.load_tables(table_file)


def test_load_tables_rejects_bad_pair_key(simulator: LocalSimulator, tmp_path: Path) -> None:
    table_file: Path = tmp_path / "extra.json"
    table_file.write_text(json.dumps({"english-french": {"words": {"a": "b"}}}), encoding="utf-8")

    with pytest.raises(ValueError, match="Language pair"):
        simulator.load_tables(table_file)


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ("fr", "Bonjour - hi"),
        ("ja", "こんにちは - hi"),
        ("RU", "Привет - hi"),
        ("sv", "[sv] hi"),
    ],
)
def test_fallback_translation(target: str, expected: str) -> None:
    assert fallback_translation("hi", target) == expected
