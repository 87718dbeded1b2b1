"""
Web API Client - Request Dispatcher.

============================================================
PURPOSE
============================================================
Async client for the TickTrader Web API.

- One coroutine per logical operation
- Public market-data operations are unsigned
- Account and trading operations are HMAC-signed
- No retries, no caching, no response interpretation

============================================================
USAGE
============================================================
```python
async with TickTraderWebClient(address, web_api_id, key, secret) as client:
    response = await client.get_public_symbol("EUR/USD")
    trade = await client.create_trade(TradeCreateRequest(
        type=TradeType.MARKET, side=TradeSide.BUY,
        symbol="EURUSD", amount=1000,
    ))
```

============================================================
"""

import json
import logging
import time
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from ..core.clock import ClockProtocol, default_clock
from ..core.exceptions import HttpError, TransportError
from .config import WebApiConfig, validate_address
from .endpoints import Operation, build_url, get_operation
from .logging_utils import RequestLogger
from .signer import Credentials, SigningContext, sign
from .transport import AiohttpTransport, HttpRequest, HttpResponse, HttpTransport
from .types import (
    Number,
    RequestBody,
    TradeDeleteType,
    body_to_dict,
    json_default,
)


logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

TradeId = Union[int, str]


def serialize_body(body: Any) -> Optional[str]:
    """
    Serialize a request body once, compactly.

    None means no body at all; an empty dict serializes to "{}".
    """
    if body is None:
        return None
    return json.dumps(
        body_to_dict(body),
        separators=(",", ":"),
        ensure_ascii=False,
        default=json_default,
    )


# ============================================================
# TICKTRADER WEB CLIENT
# ============================================================

class TickTraderWebClient:
    """
    TickTrader Web API client.

    Credentials are immutable after construction, so one client
    may serve any number of concurrent calls.
    """

    def __init__(
        self,
        address: str,
        web_api_id: str = "",
        web_api_key: str = "",
        web_api_secret: str = "",
        transport: Optional[HttpTransport] = None,
        clock: Optional[ClockProtocol] = None,
        timeout_seconds: float = 30.0,
        verify_ssl: bool = True,
    ):
        """
        Initialize client.

        Args:
            address: Web API base address
            web_api_id: Web API id
            web_api_key: Web API key
            web_api_secret: Web API secret
            transport: HTTP transport (aiohttp by default)
            clock: Time source for signatures
            timeout_seconds: Request timeout for the default transport
            verify_ssl: TLS verification for the default transport

        Raises:
            ConfigurationError: If address is empty
        """
        validate_address(address)

        self._address = address.rstrip("/")
        self._credentials = Credentials(id=web_api_id, key=web_api_key, secret=web_api_secret)
        self._transport = transport or AiohttpTransport(
            timeout_seconds=timeout_seconds,
            verify_ssl=verify_ssl,
        )
        self._clock = clock or default_clock()
        self._logger = RequestLogger("webapi")

    @classmethod
    def from_config(
        cls,
        config: WebApiConfig,
        transport: Optional[HttpTransport] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> "TickTraderWebClient":
        """Create client from a WebApiConfig."""
        return cls(
            address=config.address,
            web_api_id=config.web_api_id,
            web_api_key=config.web_api_key,
            web_api_secret=config.web_api_secret,
            transport=transport,
            clock=clock,
            timeout_seconds=config.timeout_seconds,
            verify_ssl=config.verify_ssl,
        )

    # --------------------------------------------------------
    # PROPERTIES
    # --------------------------------------------------------

    @property
    def address(self) -> str:
        return self._address

    @property
    def web_api_id(self) -> str:
        return self._credentials.id

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    # --------------------------------------------------------
    # LIFECYCLE
    # --------------------------------------------------------

    async def close(self) -> None:
        """Release the transport."""
        await self._transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # --------------------------------------------------------
    # REQUEST HANDLING
    # --------------------------------------------------------

    def build_request(
        self,
        operation: Operation,
        path_params: Optional[Dict[str, Any]] = None,
        query: Optional[Sequence[Tuple[str, Any]]] = None,
        body: Any = None,
    ) -> HttpRequest:
        """
        Assemble, and sign if private, the request for an operation.

        The URL and body are final before signing.

        Raises:
            CredentialError: If a private operation lacks credentials
        """
        url = build_url(self._address, operation, path_params, query)
        body_text = serialize_body(body) if operation.has_body else None

        headers: Dict[str, str] = {}
        if body_text is not None:
            headers["Content-Type"] = JSON_CONTENT_TYPE

        if operation.signed:
            context = SigningContext(method=operation.method, url=url, body=body_text)
            headers.update(sign(context, self._credentials, self._clock).as_headers())

        return HttpRequest(
            method=operation.method,
            url=url,
            headers=headers,
            body=body_text.encode("utf-8") if body_text is not None else None,
        )

    async def _request(
        self,
        name: str,
        path_params: Optional[Dict[str, Any]] = None,
        query: Optional[Sequence[Tuple[str, Any]]] = None,
        body: Any = None,
    ) -> HttpResponse:
        operation = get_operation(name)
        request = self.build_request(operation, path_params, query, body)

        request_id = self._logger.log_request(
            operation=name,
            method=request.method,
            url=request.url,
            signed=operation.signed,
            headers=request.headers,
            body=request.body,
        )

        start_time = time.monotonic()

        try:
            response = await self._transport.send(request)
        except TransportError as e:
            self._logger.log_response(
                operation=name,
                request_id=request_id,
                status_code=0,
                latency_ms=(time.monotonic() - start_time) * 1000,
                success=False,
                error_message=e.message,
            )
            raise

        latency_ms = (time.monotonic() - start_time) * 1000

        if not response.ok:
            self._logger.log_response(
                operation=name,
                request_id=request_id,
                status_code=response.status,
                latency_ms=latency_ms,
                success=False,
                response_body=response.body,
            )
            raise HttpError(
                status=response.status,
                body=response.body,
                method=request.method,
                url=request.url,
                headers=response.headers,
            )

        self._logger.log_response(
            operation=name,
            request_id=request_id,
            status_code=response.status,
            latency_ms=latency_ms,
            success=True,
        )
        return response

    # --------------------------------------------------------
    # PUBLIC MARKET DATA
    # --------------------------------------------------------

    async def get_public_trade_session(self) -> HttpResponse:
        """Get public trade session information."""
        return await self._request("get_public_trade_session")

    async def get_public_all_currencies(self) -> HttpResponse:
        """Get list of all available public currencies."""
        return await self._request("get_public_all_currencies")

    async def get_public_currency(self, currency: str) -> HttpResponse:
        """Get public currency by name."""
        return await self._request("get_public_currency", {"currency": currency})

    async def get_public_all_symbols(self) -> HttpResponse:
        """Get list of all available public symbols."""
        return await self._request("get_public_all_symbols")

    async def get_public_symbol(self, symbol: str) -> HttpResponse:
        """Get public symbol by name."""
        return await self._request("get_public_symbol", {"symbol": symbol})

    async def get_public_all_ticks(self) -> HttpResponse:
        """Get list of all available public feed ticks."""
        return await self._request("get_public_all_ticks")

    async def get_public_tick(self, symbol: str) -> HttpResponse:
        """Get public feed tick by symbol name."""
        return await self._request("get_public_tick", {"symbol": symbol})

    async def get_public_all_ticks_level2(self) -> HttpResponse:
        """Get list of all available public level2 ticks."""
        return await self._request("get_public_all_ticks_level2")

    async def get_public_tick_level2(self, symbol: str) -> HttpResponse:
        """Get public level2 tick by symbol name."""
        return await self._request("get_public_tick_level2", {"symbol": symbol})

    # --------------------------------------------------------
    # ACCOUNT
    # --------------------------------------------------------

    async def get_account(self) -> HttpResponse:
        """Get account information."""
        return await self._request("get_account")

    async def get_trade_session(self) -> HttpResponse:
        """Get trade session information."""
        return await self._request("get_trade_session")

    # --------------------------------------------------------
    # PRIVATE MARKET DATA
    # --------------------------------------------------------

    async def get_all_currencies(self) -> HttpResponse:
        return await self._request("get_all_currencies")

    async def get_currency(self, currency: str) -> HttpResponse:
        return await self._request("get_currency", {"currency": currency})

    async def get_all_symbols(self) -> HttpResponse:
        return await self._request("get_all_symbols")

    async def get_symbol(self, symbol: str) -> HttpResponse:
        return await self._request("get_symbol", {"symbol": symbol})

    async def get_all_ticks(self) -> HttpResponse:
        return await self._request("get_all_ticks")

    async def get_tick(self, symbol: str) -> HttpResponse:
        return await self._request("get_tick", {"symbol": symbol})

    async def get_all_ticks_level2(self) -> HttpResponse:
        return await self._request("get_all_ticks_level2")

    async def get_tick_level2(self, symbol: str) -> HttpResponse:
        return await self._request("get_tick_level2", {"symbol": symbol})

    # --------------------------------------------------------
    # ASSETS AND POSITIONS
    # --------------------------------------------------------

    async def get_all_assets(self) -> HttpResponse:
        """Get list of all account assets (cash accounts)."""
        return await self._request("get_all_assets")

    async def get_asset(self, currency: str) -> HttpResponse:
        """Get account asset by currency name."""
        return await self._request("get_asset", {"currency": currency})

    async def get_all_positions(self) -> HttpResponse:
        """Get list of all positions (net accounts)."""
        return await self._request("get_all_positions")

    async def get_position(self, symbol: str) -> HttpResponse:
        """Get position by symbol name."""
        return await self._request("get_position", {"symbol": symbol})

    # --------------------------------------------------------
    # TRADES
    # --------------------------------------------------------

    async def get_all_trades(self) -> HttpResponse:
        """Get list of all open trades."""
        return await self._request("get_all_trades")

    async def get_trade(self, trade_id: TradeId) -> HttpResponse:
        """Get trade by id."""
        return await self._request("get_trade", {"trade_id": trade_id})

    async def create_trade(self, request: RequestBody) -> HttpResponse:
        """
        Create a new trade.

        Args:
            request: TradeCreateRequest or an equivalent dict

        Returns:
            Response carrying the created trade
        """
        return await self._request("create_trade", body=request)

    async def modify_trade(self, request: RequestBody) -> HttpResponse:
        """
        Modify an existing trade.

        Args:
            request: TradeModifyRequest or an equivalent dict
        """
        return await self._request("modify_trade", body=request)

    async def cancel_trade(self, trade_id: TradeId) -> HttpResponse:
        """Cancel a pending trade."""
        return await self._request(
            "cancel_trade",
            query=[("type", TradeDeleteType.CANCEL.value), ("id", trade_id)],
        )

    async def close_trade(self, trade_id: TradeId, amount: Optional[Number] = None) -> HttpResponse:
        """
        Close a market position, fully or partially.

        Args:
            trade_id: Trade id
            amount: Amount to close. Only None omits the parameter;
                0 is sent as amount=0
        """
        return await self._request(
            "close_trade",
            query=[("type", TradeDeleteType.CLOSE.value), ("id", trade_id), ("amount", amount)],
        )

    async def close_by_trade(self, trade_id: TradeId, by_trade_id: TradeId) -> HttpResponse:
        """Close a position by an opposite position."""
        return await self._request(
            "close_by_trade",
            query=[("type", TradeDeleteType.CLOSE_BY.value), ("id", trade_id), ("byid", by_trade_id)],
        )

    # --------------------------------------------------------
    # TRADE HISTORY
    # --------------------------------------------------------

    async def get_trade_history(self, request: Optional[RequestBody] = None) -> HttpResponse:
        """
        Get a page of trade history.

        Args:
            request: TradeHistoryRequest or dict; None sends no body at all
        """
        return await self._request(
            "get_trade_history",
            body=request,
        )

    async def get_trade_history_by_trade_id(
        self,
        trade_id: TradeId,
        request: Optional[RequestBody] = None,
    ) -> HttpResponse:
        """Get a page of trade history for one trade."""
        return await self._request(
            "get_trade_history_by_trade_id",
            {"trade_id": trade_id},
            body=request,
        )


__all__ = [
    "JSON_CONTENT_TYPE",
    "TickTraderWebClient",
    "serialize_body",
]
