"""
TickTrader Web API client.

============================================================
PURPOSE
============================================================
Async, HMAC-signed client for the TickTrader Web API plus a
push-channel session with request/reply correlation.

============================================================
"""

from .core import (
    ClockProtocol,
    SystemClock,
    MockClock,
    WebApiError,
    ConfigurationError,
    CredentialError,
    HttpError,
    TransportError,
)
from .client import (
    Credentials,
    SigningContext,
    AuthHeader,
    sign,
    TradeType,
    TradeSide,
    RequestDirection,
    TradeCreateRequest,
    TradeModifyRequest,
    TradeHistoryRequest,
    HttpRequest,
    HttpResponse,
    HttpTransport,
    AiohttpTransport,
    MockTransport,
    WebApiConfig,
    TickTraderWebClient,
    ClientResult,
    create_client,
)
from .push import PushSession, PushConfig, PushRequestError


__version__ = "2.0.0"

__all__ = [
    # Core
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "WebApiError",
    "ConfigurationError",
    "CredentialError",
    "HttpError",
    "TransportError",
    # Client
    "Credentials",
    "SigningContext",
    "AuthHeader",
    "sign",
    "TradeType",
    "TradeSide",
    "RequestDirection",
    "TradeCreateRequest",
    "TradeModifyRequest",
    "TradeHistoryRequest",
    "HttpRequest",
    "HttpResponse",
    "HttpTransport",
    "AiohttpTransport",
    "MockTransport",
    "WebApiConfig",
    "TickTraderWebClient",
    "ClientResult",
    "create_client",
    # Push
    "PushSession",
    "PushConfig",
    "PushRequestError",
]
