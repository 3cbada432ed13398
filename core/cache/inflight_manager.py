from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, ClassVar, Final

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.translation_models import TranslationResult


__all__: list[str] = ["InFlightManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

KEY_LOG_WIDTH: Final[int] = 32


def _short(key: str) -> str:
    return key[:KEY_LOG_WIDTH]


class InFlightManager:
    """Lets concurrent requests for the same key share one resolution.

    The first request for a key owns it: a Future is parked under the key and the owner is told to
    resolve. Requests arriving while the key is parked wait on that Future. The owner publishes with
    ``store_inflight_result`` or ``store_inflight_exception``, which also frees the key.

    Attributes:
        DEFAULT_TIMEOUT_SEC (float): How long a follower waits for the owner.
    """

    DEFAULT_TIMEOUT_SEC: ClassVar[float] = 10.0

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SEC) -> None:
        self.timeout: float = timeout
        self._inflight: dict[str, asyncio.Future[TranslationResult]] = {}
        self._lock: asyncio.Lock = asyncio.Lock()
        self._is_initialized: bool = False

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    def __len__(self) -> int:
        return len(self._inflight)

    async def component_load(self) -> None:
        self._is_initialized = True
        logger.info("InFlightManager ready (follower timeout %.1fs)", self.timeout)

    async def component_teardown(self) -> None:
        """Stop coalescing; followers still waiting see their Future cancelled."""
        self._is_initialized = False
        async with self._lock:
            pending: list[asyncio.Future[TranslationResult]] = list(self._inflight.values())
            self._inflight.clear()
        for fut in pending:
            if not fut.done():
                fut.cancel()
        logger.info("InFlightManager stopped, %d pending request(s) cancelled", len(pending))

    async def mark_inflight_start(self, cache_key: str | None) -> TranslationResult | None:
        """Claim ``cache_key`` or follow the request that already holds it.

        Args:
            cache_key (str | None): Coalescing key.

        Returns:
            TranslationResult | None: None when the caller owns the key (or coalescing is not
            running); otherwise the owner's result.

        Raises:
            TimeoutError: The owner did not publish in time, or its Future was cancelled.
        """
        if not self._is_initialized:
            return None
        if not cache_key:
            logger.warning("Empty key passed to mark_inflight_start; request is not coalesced")
            return None

        async with self._lock:
            owner: asyncio.Future[TranslationResult] | None = self._inflight.get(cache_key)
            if owner is None:
                self._inflight[cache_key] = asyncio.get_running_loop().create_future()
                logger.debug("Request owns key: %s", _short(cache_key))
                return None

        logger.debug("Following in-flight request for key: %s", _short(cache_key))
        try:
            # shield: a follower giving up must not cancel the owner's Future
            return await asyncio.wait_for(asyncio.shield(owner), timeout=self.timeout)
        except (TimeoutError, asyncio.CancelledError) as err:
            reason: str = "timed out" if isinstance(err, TimeoutError) else "cancelled"
            logger.warning("In-flight translation %s for key: %s", reason, _short(cache_key))
            async with self._lock:
                if self._inflight.get(cache_key) is owner:
                    del self._inflight[cache_key]
            msg: str = f"In-flight translation {reason} for key: {_short(cache_key)}"
            raise TimeoutError(msg) from None

    async def store_inflight_result(self, cache_key: str | None, result: TranslationResult) -> None:
        """Publish the owner's result to every follower and free the key."""
        fut: asyncio.Future[TranslationResult] | None = await self._release(cache_key)
        if fut is not None and not fut.done():
            fut.set_result(result)

    async def store_inflight_exception(self, cache_key: str | None, exc: Exception) -> None:
        """Fail every follower with ``exc`` and free the key."""
        fut: asyncio.Future[TranslationResult] | None = await self._release(cache_key)
        if fut is not None and not fut.done():
            fut.set_exception(exc)
            # mark retrieved; there may be no follower left to read it
            fut.exception()

    async def _release(self, cache_key: str | None) -> asyncio.Future[TranslationResult] | None:
        if not cache_key:
            logger.warning("Empty key passed when publishing an in-flight outcome")
            return None
        async with self._lock:
            fut: asyncio.Future[TranslationResult] | None = self._inflight.pop(cache_key, None)
        if fut is not None:
            logger.debug("Released key: %s", _short(cache_key))
        return fut
