"""
Push Channel - Session.

============================================================
PURPOSE
============================================================
WebSocket session for the real-time push channel.

FEATURES:
- One connection per session object
- Request/reply correlation by request id
- Pending-request table owned by the session (no globals)
- Pending requests fail on teardown
- Unsolicited messages delivered to session listeners

============================================================
MESSAGE SHAPE
============================================================
Outgoing:  {"callbackId": <request id>, "method": <name>, "params": {...}}
Reply:     {"callbackId": <request id>, "result": ...}
           {"callbackId": <request id>, "error": ...}

Replies may carry the request id as "id" instead of "callbackId".
Anything without a known id is a notification.

============================================================
"""

import asyncio
import inspect
import itertools
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import aiohttp

from ..core.exceptions import TransportError, WebApiError


logger = logging.getLogger(__name__)


# ============================================================
# CONNECTION STATE
# ============================================================

class ConnectionState(Enum):
    """WebSocket connection states."""

    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    CLOSING = "CLOSING"


@dataclass
class PushConfig:
    """Push session configuration."""

    url: str
    request_timeout_seconds: float = 30.0
    heartbeat_seconds: float = 20.0


class PushRequestError(WebApiError):
    """The push server answered a request with an error."""

    def __init__(self, request_id: Any, method: str, error: Any):
        super().__init__(
            message=f"Push request {method} ({request_id}) failed: {error}",
            context={"request_id": request_id, "method": method},
        )
        self.request_id = request_id
        self.method = method
        self.error = error


Listener = Callable[[Dict[str, Any]], Any]


def _is_request_id(value: Any) -> bool:
    # ints and strings only; bool excluded (True == 1)
    return isinstance(value, (int, str)) and not isinstance(value, bool)


# ============================================================
# PUSH SESSION
# ============================================================

class PushSession:
    """
    Push channel connection with per-session request correlation.

    Each request registers a future under its id; the receive loop
    resolves the future when the matching reply arrives. Entries are
    removed on completion, timeout or teardown.
    """

    def __init__(
        self,
        url: str,
        config: Optional[PushConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize push session.

        Args:
            url: WebSocket URL
            config: Session configuration
            session: Externally owned aiohttp session
        """
        self._url = url
        self._config = config or PushConfig(url=url)

        self._state = ConnectionState.DISCONNECTED
        self._session = session
        self._owns_session = session is None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._receive_task: Optional[asyncio.Task] = None

        self._ids = itertools.count(1)
        self._pending: Dict[Any, "asyncio.Future[Any]"] = {}
        self._pending_methods: Dict[Any, str] = {}
        self._listeners: List[Listener] = []

    # --------------------------------------------------------
    # PROPERTIES
    # --------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED and self._ws is not None

    @property
    def url(self) -> str:
        return self._url

    @property
    def pending_count(self) -> int:
        """Number of requests awaiting a reply."""
        return len(self._pending)

    # --------------------------------------------------------
    # CONNECTION
    # --------------------------------------------------------

    async def connect(self) -> None:
        """
        Open the WebSocket and start the receive loop.

        Raises:
            TransportError: If the connection cannot be established
        """
        if self._state in (ConnectionState.CONNECTED, ConnectionState.CONNECTING):
            return

        self._state = ConnectionState.CONNECTING

        try:
            if self._session is None:
                self._session = aiohttp.ClientSession()
                self._owns_session = True

            self._ws = await self._session.ws_connect(
                self._url,
                heartbeat=self._config.heartbeat_seconds,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._state = ConnectionState.DISCONNECTED
            logger.error(f"Push connection failed: {e}")
            raise TransportError(
                f"Push connection failed: {e}",
                url=self._url,
                is_timeout=isinstance(e, asyncio.TimeoutError),
                cause=e,
            ) from e

        self._state = ConnectionState.CONNECTED
        logger.info(f"Push session connected: {self._url}")

        self._receive_task = asyncio.create_task(self._receive_loop())

    async def disconnect(self) -> None:
        """Close the connection and fail every pending request."""
        self._state = ConnectionState.CLOSING

        try:
            if self._receive_task:
                self._receive_task.cancel()
                try:
                    await self._receive_task
                except asyncio.CancelledError:
                    pass
                except Exception:
                    logger.exception("Push receive loop failed")
                self._receive_task = None

            if self._ws is not None and not self._ws.closed:
                await self._ws.close()
        finally:
            self._ws = None
            self._fail_pending(TransportError("Push session closed", url=self._url))

            if self._session is not None and self._owns_session:
                await self._session.close()
                self._session = None

            self._state = ConnectionState.DISCONNECTED
            logger.info("Push session disconnected")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    # --------------------------------------------------------
    # REQUESTS
    # --------------------------------------------------------

    async def request(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Send a request and wait for its reply.

        Args:
            method: Remote method name
            params: Method parameters
            timeout: Seconds to wait (config default when None)

        Returns:
            The reply's result

        Raises:
            TransportError: Not connected, timed out, or connection lost
            PushRequestError: The reply carried an error
        """
        if not self.is_connected:
            raise TransportError("Push session is not connected", url=self._url)

        request_id = next(self._ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        self._pending_methods[request_id] = method

        wait = self._config.request_timeout_seconds if timeout is None else timeout

        try:
            try:
                await self._ws.send_json({
                    "callbackId": request_id,
                    "method": method,
                    "params": params or {},
                })
            except (aiohttp.ClientError, ConnectionError) as e:
                raise TransportError(
                    f"Push request {method} could not be sent: {e}",
                    url=self._url,
                    cause=e,
                ) from e
            return await asyncio.wait_for(future, wait)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Push request {method} timed out after {wait}s",
                url=self._url,
                is_timeout=True,
                cause=e,
            ) from e
        finally:
            self._pending.pop(request_id, None)
            self._pending_methods.pop(request_id, None)

    def _fail_pending(self, error: Exception) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)
        self._pending.clear()
        self._pending_methods.clear()

    # --------------------------------------------------------
    # LISTENERS
    # --------------------------------------------------------

    def add_listener(self, callback: Listener) -> None:
        """Register a callback for unsolicited messages."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # --------------------------------------------------------
    # MESSAGE HANDLING
    # --------------------------------------------------------

    async def _receive_loop(self) -> None:
        try:
            async for msg in self._ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    await self._handle_message(msg.data)

                elif msg.type == aiohttp.WSMsgType.BINARY:
                    logger.debug(f"Binary push message ignored: {len(msg.data)} bytes")

                elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED):
                    logger.warning(f"Push socket closed: {msg.data}")
                    break

                elif msg.type == aiohttp.WSMsgType.ERROR:
                    logger.error(f"Push socket error: {self._ws.exception()}")
                    break

        finally:
            self._fail_pending(TransportError("Push connection lost", url=self._url))
            if self._state == ConnectionState.CONNECTED:
                self._state = ConnectionState.DISCONNECTED

    async def _handle_message(self, data: str) -> None:
        try:
            message = json.loads(data)
        except json.JSONDecodeError:
            logger.warning(f"Non-JSON push message: {data[:100]}")
            return

        if not isinstance(message, dict):
            await self._notify({"data": message})
            return

        request_id = message.get("callbackId", message.get("id"))
        future = self._pending.get(request_id) if _is_request_id(request_id) else None

        if future is None:
            await self._notify(message)
            return

        if future.done():
            return

        if message.get("error") is not None:
            method = self._pending_methods.get(request_id, "")
            future.set_exception(PushRequestError(request_id, method, message["error"]))
        else:
            future.set_result(message.get("result"))

    async def _notify(self, message: Dict[str, Any]) -> None:
        for callback in list(self._listeners):
            try:
                result = callback(message)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Push listener failed")


__all__ = [
    "ConnectionState",
    "PushConfig",
    "PushRequestError",
    "PushSession",
]
