from __future__ import annotations

import logging
import sys
import warnings
from logging import Formatter, NullHandler, StreamHandler
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, ClassVar, Final, Literal, Self, TextIO, TypeAlias

if TYPE_CHECKING:
    from pathlib import Path

__all__: list[str] = ["LoggerUtils"]

LevelType: TypeAlias = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

LOG_FILE_MAX_BYTES: Final[int] = 2 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 2
CONSOLE_FORMAT: Final[str] = "%(levelname)s: %(message)s"
FILE_FORMAT: Final[str] = "%(asctime)s %(levelname)-8s %(name)-45s %(funcName)s:%(lineno)d\t%(message)s"

DEFAULT_LOG_LEVEL: Final[int] = logging.INFO
DEFAULT_NAMESPACE: Final[str] = "TransResolver"


class LoggerUtils:
    """Single logging setup for the whole resolver.

    Modules never call ``logging.getLogger`` directly; ``get_logger`` hangs each of them under
    ``TransResolver`` so one level switch and one set of handlers cover the engine, the adapters
    and the stores. Handlers are attached by the first instantiation only.
    """

    _LOGGER_NAMESPACE: ClassVar[str] = DEFAULT_NAMESPACE
    _configured: ClassVar[bool] = False
    _instance: ClassVar[Self | None] = None

    def __new__(cls, *args, **kwargs) -> Self:
        _ = args, kwargs
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, filename: str | Path = "", *, use_null_console: bool = False) -> None:
        """Attach the console handler and, when ``filename`` is given, a rotating file handler.

        Args:
            filename (str | Path): Log file; empty keeps logging on the console only.
            use_null_console (bool): Swallow console output (no stderr, or embedded use).
        """
        if LoggerUtils._configured:
            return

        self.root_logger: logging.Logger = logging.getLogger(self._LOGGER_NAMESPACE)
        self.root_logger.setLevel(DEFAULT_LOG_LEVEL)

        if use_null_console or sys.stderr is None:
            self._attach(NullHandler())
        else:
            console: StreamHandler[TextIO] = StreamHandler(sys.stderr)
            console.setLevel(logging.WARNING)
            console.setFormatter(Formatter(CONSOLE_FORMAT))
            self._attach(console)

        if str(filename).strip():
            self._attach_file(str(filename))

        warnings.showwarning = self.warning_to_log
        LoggerUtils._configured = True

    @classmethod
    def setup(cls, *, log_file: str | Path = "", debug: bool = False, use_null_console: bool = False) -> Self:
        """Configure logging from the resolved GENERAL settings.

        Args:
            log_file (str | Path): Log file path; empty for console only.
            debug (bool): Let DEBUG records through.
            use_null_console (bool): Suppress console output.

        Returns:
            LoggerUtils: The configured singleton.
        """
        inst: Self = cls(log_file, use_null_console=use_null_console)
        if debug:
            inst.set_level("DEBUG")
        return inst

    def _attach(self, handler: logging.Handler) -> None:
        if any(type(h) is type(handler) for h in self.root_logger.handlers):
            return
        self.root_logger.addHandler(handler)

    def _attach_file(self, filename: str) -> None:
        try:
            handler = RotatingFileHandler(
                filename=filename,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        except OSError as err:
            self.root_logger.error("Log file '%s' cannot be opened, file logging disabled: %s", filename, err)
            return
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(Formatter(FILE_FORMAT))
        self._attach(handler)

    def warning_to_log(
        self,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: TextIO | None = None,
        line: str | None = None,
    ) -> None:
        """Drop-in for ``warnings.showwarning`` that routes warnings into the log."""
        _ = file, line
        self.root_logger.warning("%s:%d: %s: %s", filename, lineno, category.__name__, message)

    def set_level(self, level: LevelType | str) -> None:
        """Set the namespace level by name; unknown names fall back to INFO."""
        value: int | None = logging.getLevelNamesMapping().get(level.upper())
        if value is None:
            self.root_logger.setLevel(DEFAULT_LOG_LEVEL)
            self.root_logger.warning("Unknown logging level '%s', using INFO", level)
            return
        self.root_logger.setLevel(value)

    @staticmethod
    def get_logger(name: str | None = None) -> logging.Logger:
        """Logger for ``name`` under the resolver namespace; None gives the namespace logger."""
        namespace: str = LoggerUtils._LOGGER_NAMESPACE
        return logging.getLogger(f"{namespace}.{name}" if name else namespace)
