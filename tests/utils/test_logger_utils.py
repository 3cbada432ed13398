from __future__ import annotations

import logging
import warnings
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

import pytest

from utils.logger_utils import DEFAULT_NAMESPACE, LoggerUtils

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture
def fresh_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[logging.Logger]:
    """Unconfigured LoggerUtils; handlers and level of the namespace logger are restored afterwards."""
    monkeypatch.setattr(LoggerUtils, "_instance", None)
    monkeypatch.setattr(LoggerUtils, "_configured", False)
    monkeypatch.setattr(warnings, "showwarning", warnings.showwarning)

    namespace_logger: logging.Logger = logging.getLogger(DEFAULT_NAMESPACE)
    saved_handlers: list[logging.Handler] = list(namespace_logger.handlers)
    saved_level: int = namespace_logger.level
    yield namespace_logger
    for handler in namespace_logger.handlers:
        if handler not in saved_handlers:
            handler.close()
    namespace_logger.handlers = saved_handlers
    namespace_logger.setLevel(saved_level)


def test_get_logger_uses_namespace() -> None:
    assert LoggerUtils.get_logger("core.trans.manager").name == "TransResolver.core.trans.manager"
    assert LoggerUtils.get_logger().name == "TransResolver"


def test_setup_is_a_singleton_and_attaches_file_handler(fresh_logging: logging.Logger, tmp_path: Path) -> None:
    log_file: Path = tmp_path / "resolver.log"

    first: LoggerUtils = LoggerUtils.setup(log_file=log_file, use_null_console=True)
    second: LoggerUtils = LoggerUtils.setup(log_file=tmp_path / "other.log", use_null_console=True)

    assert first is second
    file_handlers = [h for h in fresh_logging.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert fresh_logging.level == logging.INFO


def test_debug_flag_lowers_level(fresh_logging: logging.Logger) -> None:
    LoggerUtils.setup(debug=True, use_null_console=True)

    assert fresh_logging.level == logging.DEBUG


def test_unknown_level_falls_back_to_info(fresh_logging: logging.Logger, caplog: pytest.LogCaptureFixture) -> None:
    utils: LoggerUtils = LoggerUtils.setup(use_null_console=True)

    utils.set_level("VERBOSE")

    assert fresh_logging.level == logging.INFO
    assert "Unknown logging level 'VERBOSE'" in caplog.text


def test_warnings_are_routed_to_log(fresh_logging: logging.Logger, caplog: pytest.LogCaptureFixture) -> None:
    utils: LoggerUtils = LoggerUtils.setup(use_null_console=True)

    assert warnings.showwarning == utils.warning_to_log
    utils.warning_to_log("deprecated table format", UserWarning, "tables.py", 12)

    assert "UserWarning: deprecated table format" in caplog.text
