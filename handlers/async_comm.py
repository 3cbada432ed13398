"""aiohttp client shared by the REST translation adapters.

One ``AsyncHttp`` owns one ``ClientSession``. Every call gets its own total timeout, and the body
is decoded by whichever decoder is registered for the response Content-Type. Failures leave this
module as ``AsyncCommError`` and its subclasses; adapters decide what they mean for a provider.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Final, Literal, Self

import aiohttp
from aiohttp.client import ClientSession

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from aiohttp.client import ClientResponse


__all__: list[str] = ["AsyncCommError", "AsyncCommInvalidContentTypeError", "AsyncCommTimeoutError", "AsyncHttp"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["GET", "POST"]

CONNECT_TIMEOUT: Final[float] = 1.0
DEFAULT_TOTAL_TIMEOUT: Final[float] = 10.0


def _utf8(raw: bytes) -> str:
    return raw.decode("utf-8")


def _json(raw: bytes) -> Any:
    return json.loads(raw.decode("utf-8"))


class AsyncHttp:
    """Lazily opened aiohttp session plus a Content-Type to decoder table.

    Nothing touches the network until ``session`` is first read, so adapters can build their client
    while the config is loaded, before any event loop is running.
    """

    def __init__(self) -> None:
        self.__session: ClientSession | None = None
        self.content_handlers: dict[str, Callable[[bytes], Any]] = {
            "application/json": _json,
            "text/plain": _utf8,
            "text/html": _utf8,
        }

    async def __aenter__(self) -> Self:
        self.initialize_session(suppress_already_log=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        await self.close()

    def initialize_session(self, *, suppress_already_log: bool = False) -> None:
        """Open a session unless a live one is already held.

        Args:
            suppress_already_log (bool): Stay quiet when the session is already open.
        """
        if self.is_open:
            if not suppress_already_log:
                logger.debug("%s session already initialized", type(self).__name__)
            return
        self.__session = ClientSession(raise_for_status=True)
        logger.debug("%s session initialized", type(self).__name__)

    @property
    def session(self) -> ClientSession:
        if not self.is_open:
            self.initialize_session()
        return self.__session  # type: ignore[return-value]

    @property
    def is_open(self) -> bool:
        return self.__session is not None and not self.__session.closed

    async def close(self) -> None:
        session: ClientSession | None = self.__session
        self.__session = None
        if session is not None and not session.closed:
            await session.close()
            logger.debug("%s session closed", type(self).__name__)

    async def post(
        self,
        *,
        url: str,
        data: Any | None = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        total_timeout: float = DEFAULT_TOTAL_TIMEOUT,
    ) -> Any:
        """Send ``data`` as a JSON body and return the decoded answer.

        Args:
            url (str): Endpoint.
            data (Any | None): JSON-serialisable body.
            params (dict[str, str] | None): Query string parameters.
            headers (dict[str, str] | None): Extra headers, e.g. subscription keys.
            total_timeout (float): Seconds for the whole exchange; 0 or less means no limit.

        Returns:
            Any: Parsed JSON, text, or None when the body is empty.
        """
        return await self.request("POST", url, total_timeout, json=data, params=params, headers=headers)

    async def request(self, method: HTTPMethod, url: str, total_timeout: float, **options: Any) -> Any:
        """Run one request; ``options`` with a None value are not passed to aiohttp.

        Raises:
            AsyncCommTimeoutError: No complete answer within ``total_timeout``.
            AsyncCommError: Connection failure or a non-2xx status.
            AsyncCommInvalidContentTypeError: No decoder for the answer.
        """
        logger.debug("%s %s (timeout=%s)", method, url, total_timeout)
        passed: dict[str, Any] = {name: value for name, value in options.items() if value is not None}

        try:
            async with self.session.request(
                method, url, timeout=self._build_timeout(total_timeout), **passed
            ) as resp:
                return await self.decode_response(resp)
        except TimeoutError as err:
            msg = f"No response from {url} within {total_timeout}s"
            raise AsyncCommTimeoutError(msg) from err
        except aiohttp.ClientResponseError as err:
            msg = f"{url} answered with an error"
            raise AsyncCommError(msg, response=err) from err
        except (aiohttp.ClientConnectorError, ConnectionResetError) as err:
            msg = f"Connection to {url} failed: {err}"
            raise AsyncCommError(msg) from err
        except aiohttp.ClientError as err:
            msg = f"HTTP client error: {err}"
            raise AsyncCommError(msg) from err

    async def decode_response(self, resp: ClientResponse) -> Any:
        """Decode the body with the decoder registered for its media type.

        Raises:
            AsyncCommInvalidContentTypeError: Nothing is registered for the media type.
        """
        media_type: str = resp.headers.get("Content-Type", "").partition(";")[0].strip().lower()
        raw: bytes = await resp.read()
        if not raw:
            logger.debug("Empty '%s' body", media_type)
            return None

        decoder: Callable[[bytes], Any] | None = self.content_handlers.get(media_type)
        if decoder is None:
            msg: str = f"Unknown Content-Type '{media_type}'"
            raise AsyncCommInvalidContentTypeError(msg)
        return decoder(raw)

    def add_handler(self, content_type: str, handler: Callable[[bytes], Any]) -> None:
        """Register ``handler`` for ``content_type``; an earlier one is replaced."""
        if content_type in self.content_handlers:
            logger.warning("Handler for content type '%s' already exists, replacing it", content_type)
        self.content_handlers[content_type] = handler

    @staticmethod
    def _build_timeout(total_timeout: float) -> aiohttp.ClientTimeout:
        if total_timeout <= 0:
            return aiohttp.ClientTimeout(total=None)
        # connect must not exceed total or it never fires
        connect: float | None = CONNECT_TIMEOUT if total_timeout >= CONNECT_TIMEOUT else None
        return aiohttp.ClientTimeout(total=total_timeout, connect=connect)


class AsyncCommError(Exception):
    """HTTP exchange failed.

    Attributes:
        msg (str): Message, with the HTTP status appended when there was one.
        status (int | None): HTTP status of the failed response.
    """

    def __init__(self, msg: str | BaseException, *, response: aiohttp.ClientResponseError | None = None) -> None:
        self.msg: str = str(msg)
        self.status: int | None = None
        if isinstance(response, aiohttp.ClientResponseError):
            self.status = response.status
            self.msg = f"{self.msg}: status='{response.status}'"
        super().__init__(self.msg)


class AsyncCommTimeoutError(AsyncCommError):
    """The exchange outlived its timeout."""


class AsyncCommInvalidContentTypeError(AsyncCommError):
    """No decoder is registered for the response media type."""
