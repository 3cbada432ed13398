"""Configuration data models for the translation resolver.

Each dataclass mirrors one INI section. Field defaults double as the type template used when
coercing INI strings, so every field must carry a default of the intended type.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__: list[str] = [
    "DEFAULT_PROVIDER_PRIORITY",
    "Cache",
    "Config",
    "General",
    "Memory",
    "Providers",
    "Simulator",
    "Translation",
]

DEFAULT_PROVIDER_PRIORITY: tuple[str, ...] = ("deepl", "google", "microsoft", "libre")


@dataclass
class General:
    DEBUG: bool = False
    LOG_FILE: str = ""
    SCRIPT_NAME: str = ""


@dataclass
class Translation:
    ENABLE_PROVIDERS: bool = True
    PRIORITY: list[str] = field(default_factory=lambda: list(DEFAULT_PROVIDER_PRIORITY))
    PROVIDER_TIMEOUT: float = 10.0
    DEFAULT_SOURCE_LANGUAGE: str = "en"


@dataclass
class Providers:
    LIBRE_URL: str = "https://libretranslate.com/translate"
    MICROSOFT_URL: str = "https://api.cognitive.microsofttranslator.com/translate"
    MICROSOFT_REGION: str = ""
    DEEPL_SERVER_URL: str = ""


@dataclass
class Cache:
    CAPACITY: int = 200
    COALESCE_REQUESTS: bool = True
    INFLIGHT_TIMEOUT: float = 10.0


@dataclass
class Memory:
    DB_PATH: str = "translation_memory.db"


@dataclass
class Simulator:
    DICTIONARY_FILE: str = ""


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    TRANSLATION: Translation = field(default_factory=Translation)
    PROVIDERS: Providers = field(default_factory=Providers)
    CACHE: Cache = field(default_factory=Cache)
    MEMORY: Memory = field(default_factory=Memory)
    SIMULATOR: Simulator = field(default_factory=Simulator)
