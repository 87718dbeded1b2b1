"""
Web API Client - Types.

============================================================
PURPOSE
============================================================
Enumerations and request bodies for the trading endpoints.

Bodies serialize to the camelCase JSON field names the Web API
expects. Optional fields left as None are omitted, so an
unset field never reaches the server as null.

============================================================
"""

from dataclasses import dataclass, fields
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union


Number = Union[int, float, Decimal]


# ============================================================
# ENUMERATIONS
# ============================================================

class TradeType(str, Enum):
    """Order type for new trades."""

    MARKET = "Market"
    LIMIT = "Limit"
    STOP = "Stop"


class TradeSide(str, Enum):
    """Trade side."""

    BUY = "Buy"
    SELL = "Sell"


class RequestDirection(str, Enum):
    """Paging direction for trade history."""

    FORWARD = "Forward"
    BACKWARD = "Backward"


class TradeDeleteType(str, Enum):
    """Value of the `type` query parameter on DELETE /api/v2/trade."""

    CANCEL = "Cancel"
    CLOSE = "Close"
    CLOSE_BY = "CloseBy"


# ============================================================
# SERIALIZATION HELPERS
# ============================================================

def _camel_case(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


def _json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        # Integral decimals keep integer form, others go out as float
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def json_default(value: Any) -> Any:
    """json.dumps ``default`` hook for enums and decimals in raw dict bodies."""
    if isinstance(value, (Enum, Decimal)):
        return _json_value(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class _RequestBody:
    """Mixin turning dataclass fields into a Web API JSON object."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON object sent on the wire."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            result[_camel_case(f.name)] = _json_value(value)
        return result


# ============================================================
# TRADE REQUESTS
# ============================================================

@dataclass
class TradeCreateRequest(_RequestBody):
    """Body of POST /api/v2/trade."""

    type: TradeType
    side: TradeSide
    symbol: str
    amount: Number
    client_id: Optional[str] = None
    price: Optional[Number] = None
    stop_loss: Optional[Number] = None
    take_profit: Optional[Number] = None
    expired_timestamp: Optional[int] = None
    immediate_or_cancel: Optional[bool] = None
    comment: Optional[str] = None

    def __post_init__(self):
        self.type = TradeType(self.type)
        self.side = TradeSide(self.side)
        if not self.symbol:
            raise ValueError("symbol is required")
        if self.type in (TradeType.LIMIT, TradeType.STOP) and self.price is None:
            raise ValueError(f"price is required for {self.type.value} trades")

    def to_dict(self) -> Dict[str, Any]:
        # Field order on the wire follows the documented request layout
        data = super().to_dict()
        order = [
            "clientId", "type", "side", "symbol", "price", "amount",
            "stopLoss", "takeProfit", "expiredTimestamp",
            "immediateOrCancel", "comment",
        ]
        return {name: data[name] for name in order if name in data}


@dataclass
class TradeModifyRequest(_RequestBody):
    """Body of PUT /api/v2/trade."""

    id: Union[int, str]
    price: Optional[Number] = None
    stop_loss: Optional[Number] = None
    take_profit: Optional[Number] = None
    expired_timestamp: Optional[int] = None
    comment: Optional[str] = None


@dataclass
class TradeHistoryRequest(_RequestBody):
    """Body of POST /api/v2/tradehistory[/{tradeId}]."""

    timestamp_from: Optional[int] = None
    timestamp_to: Optional[int] = None
    request_direction: Optional[RequestDirection] = None
    request_from_id: Optional[str] = None

    def __post_init__(self):
        if self.request_direction is not None:
            self.request_direction = RequestDirection(self.request_direction)


RequestBody = Union[TradeCreateRequest, TradeModifyRequest, TradeHistoryRequest, Dict[str, Any]]


def body_to_dict(body: Any) -> Any:
    """Typed request bodies become dicts; anything else passes through."""
    if isinstance(body, _RequestBody):
        return body.to_dict()
    return body


__all__ = [
    "Number",
    "TradeType",
    "TradeSide",
    "RequestDirection",
    "TradeDeleteType",
    "TradeCreateRequest",
    "TradeModifyRequest",
    "TradeHistoryRequest",
    "RequestBody",
    "body_to_dict",
    "json_default",
]
