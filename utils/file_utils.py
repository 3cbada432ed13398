from __future__ import annotations

import os
from pathlib import Path

__all__: list[str] = [
    "FileMissingError",
    "FileUtils",
    "FileUtilsError",
    "UnsupportedFileFormatError",
]


class FileUtils:
    """Path handling shared by the config loader, the simulator tables and the sqlite stores."""

    @staticmethod
    def resolve_path(path: str | Path, *, strict: bool = False) -> Path:
        """Turn a path taken from the INI file, the environment or the CLI into an absolute one.

        ``$VARS`` and ``~`` are expanded first. Anything still relative is anchored at the
        current working directory.

        Args:
            path (str | Path): Raw path, e.g. ``"~/data/$ENV/memory.db"``.
            strict (bool): Fail when the target is missing.

        Returns:
            Path: Absolute path.
        """
        candidate: Path = Path(os.path.expandvars(str(path))).expanduser()
        if not candidate.is_absolute():
            candidate = Path.cwd() / candidate
        return candidate.resolve(strict=strict)

    @staticmethod
    def ensure_parent(path: Path) -> Path:
        """Create the directory that will hold ``path`` and hand the path back.

        Bare file names (``memory.db``, ``:memory:``) have no directory to create.
        """
        if path.parent != Path():
            path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def validate_file_path(file_path: Path, suffix: list[str] | str) -> None:
        """Check that ``file_path`` is an existing file with one of the accepted suffixes.

        Args:
            file_path (Path): File to check.
            suffix (list[str] | str): Accepted suffix or suffixes, e.g. ``".json"``.

        Raises:
            FileMissingError: Nothing exists at ``file_path``.
            UnsupportedFileFormatError: The suffix is not accepted.
        """
        accepted: list[str] = [suffix] if isinstance(suffix, str) else list(suffix)

        if not file_path.is_file():
            msg = f"File does not exist: {file_path}"
            raise FileMissingError(msg)
        if file_path.suffix.lower() not in {s.lower() for s in accepted}:
            msg = f"Unsupported file format: '{file_path.suffix}'. Supported formats are: {', '.join(accepted)}"
            raise UnsupportedFileFormatError(msg)


class FileUtilsError(Exception):
    """Raised by FileUtils helpers."""


class FileMissingError(FileUtilsError):
    """No file at the given path."""


class UnsupportedFileFormatError(FileUtilsError):
    """File suffix is not one the caller accepts."""
