"""Configuration file loader and validator.

Reads the INI configuration file into the ``Config`` dataclass tree, applies environment overrides,
and validates the result. Raises exceptions for any issues encountered during loading.
"""

from __future__ import annotations

import ast
import configparser
import os
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, Self

from models.config_models import Config
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from dataclasses import Field as DataclassField
else:
    from dataclasses import Field as DataclassField

__all__: list[str] = [
    "ALLOWED_PROVIDERS",
    "Config",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

ALLOWED_PROVIDERS: Final[list[str]] = ["deepl", "google", "microsoft", "libre"]

ENV_PREFIX: Final[str] = "TRANSRESOLVER_"
# Environment variable -> (section, key). Applied after the INI file.
ENV_OVERRIDES: Final[dict[str, tuple[str, str]]] = {
    f"{ENV_PREFIX}ENABLE_PROVIDERS": ("TRANSLATION", "ENABLE_PROVIDERS"),
    f"{ENV_PREFIX}PRIORITY": ("TRANSLATION", "PRIORITY"),
    f"{ENV_PREFIX}PROVIDER_TIMEOUT": ("TRANSLATION", "PROVIDER_TIMEOUT"),
    f"{ENV_PREFIX}DEFAULT_SOURCE_LANGUAGE": ("TRANSLATION", "DEFAULT_SOURCE_LANGUAGE"),
    f"{ENV_PREFIX}CACHE_SIZE": ("CACHE", "CAPACITY"),
    f"{ENV_PREFIX}MEMORY_DB": ("MEMORY", "DB_PATH"),
    f"{ENV_PREFIX}LIBRE_URL": ("PROVIDERS", "LIBRE_URL"),
}

_TRUE_STRINGS: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


class ConfigLoaderError(Exception):
    """An error occurred while processing the configuration file."""


class ConfigFileNotFoundError(ConfigLoaderError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigLoaderError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration file contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration file contains an invalid type."""


class ConfigLoader:
    """Handles loading and validation of configuration settings.

    Args:
        config_filename (str | None): INI file to load. None builds the configuration from defaults
            and the environment only.
        script_name (str): Executing script name, used in error messaging.
        **args: Command-line overrides. Recognised keys: ``debug``, ``log_file``, ``enable_providers``.

    Raises:
        ConfigFileNotFoundError: If the configuration file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains invalid values/types.
    """

    def __init__(
        self,
        *,
        config_filename: str | Path | None,
        script_name: str = "",
        **args: Any,
    ) -> None:
        parser: ConfigParser = ConfigParser(interpolation=None)

        msg: str
        if config_filename is not None:
            config_path = Path(config_filename)
            if not config_path.is_file():
                msg = (
                    f"Configuration file '{config_filename}' not found. "
                    f"Please create '{config_path.name}' next to '{script_name or 'the script'}'."
                )
                raise ConfigFileNotFoundError(msg)
            try:
                parser.read(config_path, encoding="utf-8")
            except configparser.Error as err:
                msg = f"Failed to parse configuration file '{config_filename}': {err}"
                raise ConfigFormatError(msg) from None

        self.config = Config()
        self.config.GENERAL.SCRIPT_NAME = script_name
        self._convert_settings(parser)
        self._apply_environment_overrides()

        if args.get("debug", False):
            self.config.GENERAL.DEBUG = True
        if args.get("log_file"):
            self.config.GENERAL.LOG_FILE = str(args["log_file"])
        if args.get("enable_providers") is not None:
            self.config.TRANSLATION.ENABLE_PROVIDERS = bool(args["enable_providers"])

        self._validate_settings()

    @classmethod
    def from_defaults(cls, script_name: str = "", **args: Any) -> Self:
        """Build a loader without an INI file (defaults plus environment overrides)."""
        return cls(config_filename=None, script_name=script_name, **args)

    def _convert_settings(self, parser: ConfigParser) -> None:
        """Copy every defined INI value onto the matching Config field.

        Raises:
            ConfigFormatError: If a value cannot be parsed or coerced to the expected type.
        """
        formatter = _ConfigFormatter(self.config)
        for section in fields(self.config):
            if not parser.has_section(section.name):
                logger.debug("Section not defined, using defaults: '%s'", section.name)
                continue
            self._convert_section_field(parser, formatter, section)

    def _convert_section_field(
        self, parser: ConfigParser, formatter: _ConfigFormatter, section: DataclassField[Any]
    ) -> None:
        for key in fields(getattr(self.config, section.name)):
            if not parser.has_option(section.name, key.name):
                logger.debug("Skipping undefined setting: '%s.%s'", section.name, key.name)
                continue

            formatted_value = formatter.apply_format(section.name, key.name, parser.get(section.name, key.name))
            setattr(getattr(self.config, section.name), key.name, formatted_value)

    def _apply_environment_overrides(self) -> None:
        """Override settings from ``TRANSRESOLVER_*`` environment variables.

        Raises:
            ConfigFormatError: If an environment value cannot be coerced to the expected type.
        """
        formatter = _ConfigFormatter(self.config)
        for env_name, (section_name, key_name) in ENV_OVERRIDES.items():
            raw: str | None = os.getenv(env_name)
            if raw is None or raw.strip() == "":
                continue
            value: Any = formatter.apply_format(section_name, key_name, raw, comma_lists=True)
            setattr(getattr(self.config, section_name), key_name, value)
            logger.debug("Setting '%s.%s' overridden by '%s'", section_name, key_name, env_name)

    def _validate_settings(self) -> None:
        """Validate numeric ranges and the provider priority list.

        Raises:
            ConfigValueError: If a numeric setting is out of range.
            ConfigTypeError: If the priority list has the wrong type.
        """
        if self.config.CACHE.CAPACITY < 1:
            msg: str = f"'CACHE.CAPACITY' must be at least 1: {self.config.CACHE.CAPACITY}"
            raise ConfigValueError(msg)
        if self.config.TRANSLATION.PROVIDER_TIMEOUT <= 0:
            msg = f"'TRANSLATION.PROVIDER_TIMEOUT' must be positive: {self.config.TRANSLATION.PROVIDER_TIMEOUT}"
            raise ConfigValueError(msg)
        if self.config.CACHE.INFLIGHT_TIMEOUT <= 0:
            msg = f"'CACHE.INFLIGHT_TIMEOUT' must be positive: {self.config.CACHE.INFLIGHT_TIMEOUT}"
            raise ConfigValueError(msg)
        default_source: str = self.config.TRANSLATION.DEFAULT_SOURCE_LANGUAGE.strip().lower()
        if not default_source or default_source == "auto":
            msg = f"'TRANSLATION.DEFAULT_SOURCE_LANGUAGE' must be a concrete language code: '{default_source}'"
            raise ConfigValueError(msg)
        self.config.TRANSLATION.DEFAULT_SOURCE_LANGUAGE = default_source
        self.config.TRANSLATION.PRIORITY = self._inspect_priority("TRANSLATION", "PRIORITY", ALLOWED_PROVIDERS)

    def _inspect_priority(self, section_name: str, key_name: str, defined_list: list[str]) -> list[str]:
        """Normalize the priority list, dropping unknown and duplicate names with a warning.

        Returns:
            list[str]: Known provider names in configured order.

        Raises:
            ConfigTypeError: If the configured value is neither list nor str.
        """
        value: Any = getattr(getattr(self.config, section_name), key_name)
        field_name: str = f"{section_name}.{key_name}"

        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        if not isinstance(value, (list, tuple)):
            msg: str = f"Unsupported type used for '{field_name}': {type(value)}"
            raise ConfigTypeError(msg)

        priority: list[str] = []
        for raw in value:
            name: str = str(raw).strip().lower()
            if name not in defined_list:
                logger.warning("Unknown value '%s' is set for '%s'", raw, field_name)
                continue
            if name in priority:
                logger.warning("Duplicate value '%s' is set for '%s'", raw, field_name)
                continue
            priority.append(name)
        return priority


class _ConfigFormatter:
    """Converts INI or environment strings to the type of the matching Config default."""

    def __init__(self, config: Config) -> None:
        self.config: Config = config

    def apply_format(self, section_name: str, key_name: str, raw: str, *, comma_lists: bool = False) -> Any:
        """Convert a raw string to the type declared by the Config default.

        Args:
            section_name (str): Section containing the key.
            key_name (str): Target field name.
            raw (str): Raw string value.
            comma_lists (bool): Accept ``a,b,c`` for list fields (used for environment values).

        Returns:
            Any: Coerced value.

        Raises:
            ConfigValueError: If a value cannot be coerced to the expected type.
            ConfigFormatError: If literal evaluation fails due to invalid syntax.
            ConfigTypeError: If the evaluated literal has the wrong type.
        """
        current: Any = getattr(getattr(self.config, section_name), key_name)
        formatters: dict[type, Callable[[str], Any]] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_float,
            str: self.parse_as_string,
        }

        formatter: Callable[[str], Any] | None = formatters.get(type(current))
        if formatter:
            try:
                return formatter(raw)
            except ValueError as err:
                msg = f"Invalid value for {section_name}.{key_name}: {err}"
                raise ConfigValueError(msg) from err

        if comma_lists and isinstance(current, list) and not raw.strip().startswith("["):
            return [part.strip() for part in raw.split(",") if part.strip()]

        try:
            value: Any = ast.literal_eval(raw.strip())
        except ValueError as err:
            msg = f"Invalid literal for {section_name}.{key_name}: {raw}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for {section_name}.{key_name}: {raw}"
            raise ConfigFormatError(msg) from err

        if not isinstance(value, type(current)):
            msg = f"Expected {type(current).__name__} for {section_name}.{key_name}, got {type(value).__name__}"
            raise ConfigTypeError(msg)
        return value

    @staticmethod
    def _strip_quotes(value: str) -> str:
        value = value.strip()
        for char in ("'", '"'):
            value = value.removeprefix(char).removesuffix(char)
        return value

    def parse_as_string(self, value: str) -> str:
        return self._strip_quotes(value)

    def parse_as_float(self, value: str) -> float:
        return float(self._strip_quotes(value))

    def parse_as_integer(self, value: str) -> int:
        return int(float(self._strip_quotes(value)))

    def parse_as_boolean(self, value: str) -> bool:
        lowered: str = self._strip_quotes(value).lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        msg: str = f"Not a boolean: '{value}'"
        raise ValueError(msg)
