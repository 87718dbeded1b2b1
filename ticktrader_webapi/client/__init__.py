"""
Web API Client Package.

============================================================
PURPOSE
============================================================
Signed REST client for the TickTrader Web API.

COMPONENTS:
- sign / Credentials / AuthHeader: HMAC request signing
- TickTraderWebClient: one coroutine per Web API operation
- AiohttpTransport / MockTransport: HTTP transports
- WebApiConfig / create_client: configuration and factory
- RequestLogger: credential-masking request logging

============================================================
"""

# Signing
from .signer import (
    AUTH_SCHEME,
    AUTHORIZATION_HEADER,
    Credentials,
    SigningContext,
    AuthHeader,
    build_signing_string,
    compute_signature,
    sign,
)

# Types
from .types import (
    TradeType,
    TradeSide,
    RequestDirection,
    TradeDeleteType,
    TradeCreateRequest,
    TradeModifyRequest,
    TradeHistoryRequest,
)

# Endpoints
from .endpoints import (
    Operation,
    OPERATIONS,
    get_operation,
    build_url,
)

# Transport
from .transport import (
    HttpRequest,
    HttpResponse,
    HttpTransport,
    AiohttpTransport,
)
from .mock import MockConfig, MockTransport

# Configuration and client
from .config import WebApiConfig
from .web_client import TickTraderWebClient, serialize_body
from .factory import ClientResult, create_client, create_client_from_env

# Logging
from .logging_utils import (
    RequestLogger,
    mask_headers,
    mask_url,
    mask_value,
)


__all__ = [
    # Signing
    "AUTH_SCHEME",
    "AUTHORIZATION_HEADER",
    "Credentials",
    "SigningContext",
    "AuthHeader",
    "build_signing_string",
    "compute_signature",
    "sign",
    # Types
    "TradeType",
    "TradeSide",
    "RequestDirection",
    "TradeDeleteType",
    "TradeCreateRequest",
    "TradeModifyRequest",
    "TradeHistoryRequest",
    # Endpoints
    "Operation",
    "OPERATIONS",
    "get_operation",
    "build_url",
    # Transport
    "HttpRequest",
    "HttpResponse",
    "HttpTransport",
    "AiohttpTransport",
    "MockConfig",
    "MockTransport",
    # Client
    "WebApiConfig",
    "TickTraderWebClient",
    "serialize_body",
    "ClientResult",
    "create_client",
    "create_client_from_env",
    # Logging
    "RequestLogger",
    "mask_headers",
    "mask_url",
    "mask_value",
]
