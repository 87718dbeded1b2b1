"""
Web API Client - HTTP Transport.

============================================================
PURPOSE
============================================================
A single capability: send one HTTP request, return status,
headers and body asynchronously.

- HttpTransport: abstract interface
- AiohttpTransport: production implementation
- MockTransport (mock.py): recording implementation for tests

The transport must send the URL untouched. The signature covers
the URL string, so re-quoting (e.g. %2F -> /) would invalidate it.

============================================================
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp
from yarl import URL

from ..core.exceptions import TransportError


logger = logging.getLogger(__name__)


# ============================================================
# REQUEST / RESPONSE
# ============================================================

@dataclass(frozen=True)
class HttpRequest:
    """One outgoing HTTP request, exactly as it goes on the wire."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


@dataclass
class HttpResponse:
    """Raw HTTP response returned to the caller."""

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    url: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status < 300

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON. An empty body decodes to None."""
        if not self.body:
            return None
        return json.loads(self.body)


# ============================================================
# TRANSPORT INTERFACE
# ============================================================

class HttpTransport(ABC):
    """Send an HTTP request and return the raw response."""

    @abstractmethod
    async def send(self, request: HttpRequest) -> HttpResponse:
        """
        Send a request.

        Raises:
            TransportError: On connection or timeout failures
        """
        pass

    async def close(self) -> None:
        """Release underlying resources."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


# ============================================================
# AIOHTTP TRANSPORT
# ============================================================

class AiohttpTransport(HttpTransport):
    """
    aiohttp-based transport.

    Lazily creates one ClientSession and reuses it until close().
    """

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        verify_ssl: bool = True,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize transport.

        Args:
            timeout_seconds: Total timeout per request
            verify_ssl: Verify TLS certificates
            session: Externally owned session (not closed by this transport)
        """
        self._timeout = timeout_seconds
        self._verify_ssl = verify_ssl
        self._session = session
        self._owns_session = session is None

    @property
    def is_open(self) -> bool:
        return self._session is not None and not self._session.closed

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._timeout)
            connector = aiohttp.TCPConnector(ssl=None if self._verify_ssl else False)
            self._session = aiohttp.ClientSession(timeout=timeout, connector=connector)
            self._owns_session = True
        return self._session

    async def send(self, request: HttpRequest) -> HttpResponse:
        session = self._get_session()

        try:
            async with session.request(
                request.method,
                URL(request.url, encoded=True),
                headers=request.headers,
                data=request.body,
            ) as resp:
                body = await resp.read()
                return HttpResponse(
                    status=resp.status,
                    headers=dict(resp.headers),
                    body=body,
                    url=request.url,
                )
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Request timed out after {self._timeout}s",
                method=request.method,
                url=request.url,
                is_timeout=True,
                cause=e,
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(
                f"Request failed: {e}",
                method=request.method,
                url=request.url,
                cause=e,
            ) from e

    async def close(self) -> None:
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.debug("HTTP session closed")
        self._session = None


__all__ = [
    "HttpRequest",
    "HttpResponse",
    "HttpTransport",
    "AiohttpTransport",
]
