"""
Web API Client - Endpoints.

============================================================
PURPOSE
============================================================
Operation descriptors for every Web API call and URL assembly.

- Path parameters are percent-encoded with no safe characters
  (EUR/USD -> EUR%2FUSD)
- Query parameters keep their documented order
- Public market-data operations are unsigned, everything
  else is signed

============================================================
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Sequence, Tuple, Any
from urllib.parse import quote


API_PREFIX = "/api/v2"
PUBLIC_PREFIX = f"{API_PREFIX}/public"


# ============================================================
# OPERATION DESCRIPTOR
# ============================================================

@dataclass(frozen=True)
class Operation:
    """Static shape of one logical Web API call."""

    name: str
    method: str
    path: str
    signed: bool = True
    has_body: bool = False

    def path_params(self) -> Tuple[str, ...]:
        """Names of `{param}` placeholders in the path template."""
        names = []
        rest = self.path
        while "{" in rest:
            start = rest.index("{")
            end = rest.index("}", start)
            names.append(rest[start + 1:end])
            rest = rest[end + 1:]
        return tuple(names)


def _op(name: str, method: str, path: str, signed: bool = True, has_body: bool = False) -> Operation:
    return Operation(name=name, method=method, path=path, signed=signed, has_body=has_body)


_OPERATION_LIST = [
    # Public market data
    _op("get_public_trade_session", "GET", f"{PUBLIC_PREFIX}/tradesession", signed=False),
    _op("get_public_all_currencies", "GET", f"{PUBLIC_PREFIX}/currency", signed=False),
    _op("get_public_currency", "GET", f"{PUBLIC_PREFIX}/currency/{{currency}}", signed=False),
    _op("get_public_all_symbols", "GET", f"{PUBLIC_PREFIX}/symbol", signed=False),
    _op("get_public_symbol", "GET", f"{PUBLIC_PREFIX}/symbol/{{symbol}}", signed=False),
    _op("get_public_all_ticks", "GET", f"{PUBLIC_PREFIX}/tick", signed=False),
    _op("get_public_tick", "GET", f"{PUBLIC_PREFIX}/tick/{{symbol}}", signed=False),
    _op("get_public_all_ticks_level2", "GET", f"{PUBLIC_PREFIX}/level2", signed=False),
    _op("get_public_tick_level2", "GET", f"{PUBLIC_PREFIX}/level2/{{symbol}}", signed=False),
    # Account
    _op("get_account", "GET", f"{API_PREFIX}/account"),
    _op("get_trade_session", "GET", f"{API_PREFIX}/tradesession"),
    # Private market data
    _op("get_all_currencies", "GET", f"{API_PREFIX}/currency"),
    _op("get_currency", "GET", f"{API_PREFIX}/currency/{{currency}}"),
    _op("get_all_symbols", "GET", f"{API_PREFIX}/symbol"),
    _op("get_symbol", "GET", f"{API_PREFIX}/symbol/{{symbol}}"),
    _op("get_all_ticks", "GET", f"{API_PREFIX}/tick"),
    _op("get_tick", "GET", f"{API_PREFIX}/tick/{{symbol}}"),
    _op("get_all_ticks_level2", "GET", f"{API_PREFIX}/level2"),
    _op("get_tick_level2", "GET", f"{API_PREFIX}/level2/{{symbol}}"),
    # Assets and positions
    _op("get_all_assets", "GET", f"{API_PREFIX}/asset"),
    _op("get_asset", "GET", f"{API_PREFIX}/asset/{{currency}}"),
    _op("get_all_positions", "GET", f"{API_PREFIX}/position"),
    _op("get_position", "GET", f"{API_PREFIX}/position/{{symbol}}"),
    # Trades
    _op("get_all_trades", "GET", f"{API_PREFIX}/trade"),
    _op("get_trade", "GET", f"{API_PREFIX}/trade/{{trade_id}}"),
    _op("create_trade", "POST", f"{API_PREFIX}/trade", has_body=True),
    _op("modify_trade", "PUT", f"{API_PREFIX}/trade", has_body=True),
    _op("cancel_trade", "DELETE", f"{API_PREFIX}/trade"),
    _op("close_trade", "DELETE", f"{API_PREFIX}/trade"),
    _op("close_by_trade", "DELETE", f"{API_PREFIX}/trade"),
    # Trade history
    _op("get_trade_history", "POST", f"{API_PREFIX}/tradehistory", has_body=True),
    _op("get_trade_history_by_trade_id", "POST", f"{API_PREFIX}/tradehistory/{{trade_id}}", has_body=True),
]

OPERATIONS: Dict[str, Operation] = {op.name: op for op in _OPERATION_LIST}


def get_operation(name: str) -> Operation:
    """Look up an operation descriptor by name."""
    try:
        return OPERATIONS[name]
    except KeyError:
        raise ValueError(f"Unknown operation: {name}") from None


# ============================================================
# URL ASSEMBLY
# ============================================================

def encode_path_param(value: Any) -> str:
    """Percent-encode a path segment, slashes included."""
    return quote(format_value(value), safe="")


def format_value(value: Any) -> str:
    """
    Render a parameter value the way JavaScript string concatenation does.

    Integral floats lose the trailing `.0`; booleans are lower-case.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    return str(value)


def build_query(params: Sequence[Tuple[str, Any]]) -> str:
    """Build a query string, skipping parameters whose value is None."""
    parts = [
        f"{name}={quote(format_value(value), safe='')}"
        for name, value in params
        if value is not None
    ]
    return "&".join(parts)


def build_url(
    base_address: str,
    operation: Operation,
    path_params: Optional[Dict[str, Any]] = None,
    query: Optional[Sequence[Tuple[str, Any]]] = None,
) -> str:
    """
    Assemble the absolute request URL.

    Args:
        base_address: Web API address, e.g. https://host:8443
        operation: Operation descriptor
        path_params: Values for the path placeholders
        query: Ordered query parameters

    Returns:
        URL string exactly as it will be sent and signed
    """
    path_params = path_params or {}
    path = operation.path
    for name in operation.path_params():
        if name not in path_params or path_params[name] is None:
            raise ValueError(f"{operation.name} requires '{name}'")
        value = encode_path_param(path_params[name])
        if not value:
            raise ValueError(f"{operation.name} requires a non-empty '{name}'")
        path = path.replace(f"{{{name}}}", value)

    url = base_address.rstrip("/") + path
    if query:
        query_string = build_query(query)
        if query_string:
            url = f"{url}?{query_string}"
    return url


__all__ = [
    "API_PREFIX",
    "PUBLIC_PREFIX",
    "Operation",
    "OPERATIONS",
    "get_operation",
    "encode_path_param",
    "format_value",
    "build_query",
    "build_url",
]
