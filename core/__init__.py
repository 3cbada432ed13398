"""Core components of the translation resolver.

This package contains the resolution engine, the provider chain and adapters, the cache and memory
tiers, and the offline-mode state.
"""

from core.offline_mode import OfflineModeManager
from core.state_storage import StateStorage
from core.version import VERSION

__all__: list[str] = [
    "VERSION",
    "OfflineModeManager",
    "StateStorage",
]
