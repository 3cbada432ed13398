from __future__ import annotations

from textwrap import dedent
from typing import TYPE_CHECKING

import pytest

from config.loader import (
    ENV_OVERRIDES,
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigLoader,
    ConfigTypeError,
    ConfigValueError,
)

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for env_name in ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)


def _write_ini(tmp_path: Path, content: str) -> Path:
    ini_path: Path = tmp_path / "transresolver.ini"
    ini_path.write_text(dedent(content), encoding="utf-8")
    return ini_path


def test_config_loader_raises_for_missing_file(tmp_path: Path) -> None:
    ini_path: Path = tmp_path / "missing.ini"
    with pytest.raises(ConfigFileNotFoundError, match="missing.ini"):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_defaults_without_file() -> None:
    loader = ConfigLoader.from_defaults(script_name="test")

    assert loader.config.TRANSLATION.PRIORITY == ["deepl", "google", "microsoft", "libre"]
    assert loader.config.TRANSLATION.ENABLE_PROVIDERS is True
    assert loader.config.CACHE.CAPACITY == 200
    assert loader.config.GENERAL.SCRIPT_NAME == "test"


def test_ini_values_are_coerced_to_field_types(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [GENERAL]
        DEBUG = yes

        [TRANSLATION]
        ENABLE_PROVIDERS = off
        PRIORITY = ["libre", "deepl"]
        PROVIDER_TIMEOUT = 2.5
        DEFAULT_SOURCE_LANGUAGE = "JA"

        [CACHE]
        CAPACITY = 50
        COALESCE_REQUESTS = false

        [MEMORY]
        DB_PATH = "data/memory.db"
        """,
    )

    config = ConfigLoader(config_filename=ini_path, script_name="test").config

    assert config.GENERAL.DEBUG is True
    assert config.TRANSLATION.ENABLE_PROVIDERS is False
    assert config.TRANSLATION.PRIORITY == ["libre", "deepl"]
    assert config.TRANSLATION.PROVIDER_TIMEOUT == 2.5
    assert config.TRANSLATION.DEFAULT_SOURCE_LANGUAGE == "ja"
    assert config.CACHE.CAPACITY == 50
    assert config.CACHE.COALESCE_REQUESTS is False
    assert config.MEMORY.DB_PATH == "data/memory.db"


def test_priority_drops_unknown_and_duplicate_names(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        PRIORITY = ["Google", "amazon", "google", "libre"]
        """,
    )

    config = ConfigLoader(config_filename=ini_path).config

    assert config.TRANSLATION.PRIORITY == ["google", "libre"]
    assert "Unknown value 'amazon'" in caplog.text
    assert "Duplicate value 'google'" in caplog.text


def test_environment_overrides_file_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [CACHE]
        CAPACITY = 50
        """,
    )
    monkeypatch.setenv("TRANSRESOLVER_CACHE_SIZE", "10")
    monkeypatch.setenv("TRANSRESOLVER_PRIORITY", "microsoft, deepl")
    monkeypatch.setenv("TRANSRESOLVER_ENABLE_PROVIDERS", "0")
    monkeypatch.setenv("TRANSRESOLVER_MEMORY_DB", "/tmp/tm.db")

    config = ConfigLoader(config_filename=ini_path).config

    assert config.CACHE.CAPACITY == 10
    assert config.TRANSLATION.PRIORITY == ["microsoft", "deepl"]
    assert config.TRANSLATION.ENABLE_PROVIDERS is False
    assert config.MEMORY.DB_PATH == "/tmp/tm.db"


def test_command_line_arguments_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRANSRESOLVER_ENABLE_PROVIDERS", "false")

    config = ConfigLoader.from_defaults(debug=True, log_file="/tmp/resolver.log", enable_providers=True).config

    assert config.GENERAL.DEBUG is True
    assert config.GENERAL.LOG_FILE == "/tmp/resolver.log"
    assert config.TRANSLATION.ENABLE_PROVIDERS is True


@pytest.mark.parametrize(
    ("section", "content"),
    [
        ("CACHE", "CAPACITY = 0"),
        ("TRANSLATION", "PROVIDER_TIMEOUT = -1"),
        ("CACHE", "INFLIGHT_TIMEOUT = 0"),
        ("TRANSLATION", 'DEFAULT_SOURCE_LANGUAGE = "auto"'),
        ("CACHE", "CAPACITY = lots"),
        ("TRANSLATION", "ENABLE_PROVIDERS = maybe"),
    ],
)
def test_invalid_values_are_rejected(tmp_path: Path, section: str, content: str) -> None:
    ini_path: Path = _write_ini(tmp_path, f"[{section}]\n{content}\n")

    with pytest.raises(ConfigValueError):
        ConfigLoader(config_filename=ini_path)


def test_priority_with_wrong_literal_type_is_rejected(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        PRIORITY = {"deepl": 1}
        """,
    )

    with pytest.raises(ConfigTypeError):
        ConfigLoader(config_filename=ini_path)


def test_malformed_literal_is_a_format_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        PRIORITY = ["deepl",
        """,
    )

    with pytest.raises(ConfigFormatError):
        ConfigLoader(config_filename=ini_path)


def test_unparseable_file_is_a_format_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(tmp_path, "CAPACITY = 1\n")

    with pytest.raises(ConfigFormatError, match="Failed to parse"):
        ConfigLoader(config_filename=ini_path)
