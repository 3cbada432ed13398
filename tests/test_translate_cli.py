from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

import translate_cli
from models.config_models import Config

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def config(tmp_path: Path) -> Config:
    cfg = Config()
    cfg.MEMORY.DB_PATH = str(tmp_path / "memory.db")
    cfg.TRANSLATION.ENABLE_PROVIDERS = False
    return cfg


def test_parse_arguments_for_translation() -> None:
    args = translate_cli.parse_arguments(["hello world", "-t", "fr", "--offline", "--skip-cache"])

    assert args.text == "hello world"
    assert args.target == "fr"
    assert args.source == "auto"
    assert args.offline is True
    assert args.skip_cache is True
    assert args.skip_memory is False


def test_online_flag_maps_to_false_and_default_is_none() -> None:
    assert translate_cli.parse_arguments(["hi", "-t", "fr", "--online"]).offline is False
    assert translate_cli.parse_arguments(["hi", "-t", "fr"]).offline is None


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["hello"],
        ["hello", "-t", "fr", "--offline", "--online"],
    ],
)
def test_invalid_arguments_exit_with_2(argv: list[str], capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        translate_cli.parse_arguments(argv)

    assert exc_info.value.code == 2
    assert "usage:" in capsys.readouterr().err


def test_maintenance_flags_do_not_need_text() -> None:
    args = translate_cli.parse_arguments(["--stats"])

    assert args.text is None
    assert args.stats is True


@pytest.mark.asyncio
async def test_run_prints_translation_json(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    args = translate_cli.parse_arguments(["hello world", "--target", "fr", "--source", "en"])

    status: int = await translate_cli.run(args, config)

    output = json.loads(capsys.readouterr().out)
    assert status == 0
    assert output["text"] == "bonjour le monde"
    assert output["confidence"] == "high"
    assert output["used_source"] == "simulation"
    assert output["fallback"] is False
    assert output["error"] == ""


@pytest.mark.asyncio
async def test_run_degraded_result_still_exits_zero(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    args = translate_cli.parse_arguments(["zzz", "-t", "fr", "-s", "en"])

    status: int = await translate_cli.run(args, config)

    output = json.loads(capsys.readouterr().out)
    assert status == 0
    assert output["text"] == "zzz (fr)"
    assert output["fallback"] is True


@pytest.mark.asyncio
async def test_run_stats_and_export(config: Config, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    export_path: Path = tmp_path / "export.jsonl"
    args = translate_cli.parse_arguments(["--stats", "--export-memory", str(export_path)])

    status: int = await translate_cli.run(args, config)

    out: str = capsys.readouterr().out
    stats = json.loads(out[out.index("{") :])
    assert status == 0
    assert "Exported 0 memory entries" in out
    assert stats["cache"] == {"size": 0, "capacity": 200}
    assert stats["memory"]["total_entries"] == 0
    assert stats["offline_mode"] is False
    assert export_path.exists()


@pytest.mark.asyncio
async def test_run_clear_memory(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    args = translate_cli.parse_arguments(["--clear-memory"])

    await translate_cli.run(args, config)

    assert "Translation memory cleared." in capsys.readouterr().out


def test_main_reports_missing_config_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    status: int = translate_cli.main(["hello", "-t", "fr", "-c", str(tmp_path / "missing.ini")])

    assert status == 1
    assert "Failed to load configuration file" in capsys.readouterr().err
