"""Process-wide offline flag with a manual override latch."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from core.state_storage import StateStorage

__all__: list[str] = ["OfflineModeManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

OFFLINE_MODE_KEY: Final[str] = "offline_mode"
MANUAL_OVERRIDE_KEY: Final[str] = "offline_manual_override"


class OfflineModeManager:
    """Holds the offline flag shared by every resolution.

    There are two writers. ``set_offline_mode`` is the explicit toggle: it sets the flag, sets the
    manual latch and persists both. ``notify_network_status`` is the automatic listener: it only
    changes the flag while the latch is clear, and does not persist.

    Reads and writes are plain attribute access, so concurrent tasks always observe one value or
    the other.
    """

    def __init__(self, storage: StateStorage | None = None) -> None:
        self._storage: StateStorage | None = storage
        self._offline: bool = False
        self._manual_override: bool = False

    @property
    def is_offline(self) -> bool:
        return self._offline

    @property
    def manual_override(self) -> bool:
        return self._manual_override

    def load(self) -> None:
        """Restore the flag and latch from storage."""
        if self._storage is None:
            return
        self._offline = bool(self._storage.load(OFFLINE_MODE_KEY, default=False))
        self._manual_override = bool(self._storage.load(MANUAL_OVERRIDE_KEY, default=False))
        logger.info("Offline mode restored: offline=%s, manual_override=%s", self._offline, self._manual_override)

    def set_offline_mode(self, mode: bool) -> None:  # noqa: FBT001
        """Explicitly switch offline mode and latch the choice."""
        self._offline = bool(mode)
        self._manual_override = True
        logger.info("Offline mode set to %s (manual)", self._offline)
        self._persist()

    def clear_manual_override(self) -> None:
        """Release the latch so network status notifications take effect again."""
        self._manual_override = False
        logger.info("Offline mode manual override cleared")
        self._persist()

    def notify_network_status(self, is_online: bool) -> bool:  # noqa: FBT001
        """Apply a network status change unless the manual latch is set.

        Returns:
            bool: True if the flag was updated.
        """
        if self._manual_override:
            logger.debug("Network status change ignored (manual override active)")
            return False
        self._offline = not is_online
        logger.info("Offline mode set to %s (network status)", self._offline)
        return True

    def _persist(self) -> None:
        if self._storage is None:
            return
        self._storage.save(OFFLINE_MODE_KEY, self._offline)
        self._storage.save(MANUAL_OVERRIDE_KEY, self._manual_override)
