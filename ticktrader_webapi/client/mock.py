"""
Web API Client - Mock Transport.

============================================================
PURPOSE
============================================================
Recording transport for tests and dry runs.

FEATURES:
- Records every request it is asked to send
- Configurable default status and body
- Per-request responses keyed by (method, path)
- Transport error injection
- Optional latency simulation

============================================================
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlsplit

from ..core.exceptions import TransportError
from .transport import HttpRequest, HttpResponse, HttpTransport


logger = logging.getLogger(__name__)


# ============================================================
# MOCK CONFIGURATION
# ============================================================

@dataclass
class MockConfig:
    """Configuration for the mock transport."""

    default_status: int = 200
    default_body: Any = field(default_factory=dict)
    latency_ms: int = 0
    headers: Dict[str, str] = field(default_factory=lambda: {"Content-Type": "application/json"})


def _encode_body(body: Any) -> bytes:
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body).encode("utf-8")


# ============================================================
# MOCK TRANSPORT
# ============================================================

class MockTransport(HttpTransport):
    """
    Mock transport for testing the client.

    Never touches the network.
    """

    def __init__(self, config: Optional[MockConfig] = None):
        self._config = config or MockConfig()
        self._requests: List[HttpRequest] = []
        self._responses: Dict[Tuple[str, str], List[HttpResponse]] = {}
        self._pending_error: Optional[TransportError] = None
        self.closed = False

    # --------------------------------------------------------
    # RECORDED STATE
    # --------------------------------------------------------

    @property
    def requests(self) -> List[HttpRequest]:
        return list(self._requests)

    @property
    def call_count(self) -> int:
        return len(self._requests)

    @property
    def last_request(self) -> Optional[HttpRequest]:
        return self._requests[-1] if self._requests else None

    def reset(self) -> None:
        self._requests.clear()
        self._responses.clear()
        self._pending_error = None

    # --------------------------------------------------------
    # CONFIGURATION
    # --------------------------------------------------------

    def add_response(
        self,
        method: str,
        path: str,
        status: int = 200,
        body: Union[bytes, str, Dict[str, Any], List[Any], None] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """Queue a response for the next request matching method and path."""
        response = HttpResponse(
            status=status,
            headers=headers or dict(self._config.headers),
            body=b"" if body is None else _encode_body(body),
        )
        self._responses.setdefault((method.upper(), path), []).append(response)

    def inject_error(self, message: str = "Connection refused", is_timeout: bool = False) -> None:
        """Make the next send fail with a TransportError."""
        self._pending_error = TransportError(message, is_timeout=is_timeout)

    # --------------------------------------------------------
    # TRANSPORT
    # --------------------------------------------------------

    async def send(self, request: HttpRequest) -> HttpResponse:
        self._requests.append(request)
        logger.debug(f"Mock send: {request.method} {request.url}")

        if self._config.latency_ms:
            await asyncio.sleep(self._config.latency_ms / 1000)

        if self._pending_error is not None:
            error, self._pending_error = self._pending_error, None
            error.method = request.method
            error.url = request.url
            raise error

        key = (request.method.upper(), urlsplit(request.url).path)
        queued = self._responses.get(key)
        if queued:
            response = queued.pop(0)
            response.url = request.url
            return response

        return HttpResponse(
            status=self._config.default_status,
            headers=dict(self._config.headers),
            body=_encode_body(self._config.default_body),
            url=request.url,
        )

    async def close(self) -> None:
        self.closed = True


__all__ = [
    "MockConfig",
    "MockTransport",
]
