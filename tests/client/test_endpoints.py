"""
Endpoint and Request Body Tests.

============================================================
PURPOSE
============================================================
Tests for operation descriptors, URL assembly and typed
request bodies.

============================================================
"""

from decimal import Decimal

import pytest

from ticktrader_webapi.client.endpoints import (
    OPERATIONS,
    build_query,
    build_url,
    encode_path_param,
    format_value,
    get_operation,
)
from ticktrader_webapi.client.types import (
    RequestDirection,
    TradeCreateRequest,
    TradeHistoryRequest,
    TradeModifyRequest,
    TradeSide,
    TradeType,
    body_to_dict,
)


# ============================================================
# OPERATION REGISTRY
# ============================================================

class TestOperationRegistry:
    """Tests for the operation descriptor table."""

    def test_operation_count(self):
        """Test every Web API operation is registered."""
        assert len(OPERATIONS) == 32

    def test_public_operations_unsigned(self):
        """Test public market-data operations are unsigned GETs."""
        public = [op for op in OPERATIONS.values() if "/public/" in op.path]

        assert len(public) == 9
        for op in public:
            assert op.signed is False
            assert op.method == "GET"

    def test_private_operations_signed(self):
        """Test every non-public operation is signed."""
        for op in OPERATIONS.values():
            if "/public/" not in op.path:
                assert op.signed is True, op.name

    def test_body_operations(self):
        """Test which operations carry a JSON body."""
        with_body = {op.name for op in OPERATIONS.values() if op.has_body}

        assert with_body == {
            "create_trade",
            "modify_trade",
            "get_trade_history",
            "get_trade_history_by_trade_id",
        }

    def test_path_params(self):
        """Test placeholder extraction."""
        assert get_operation("get_symbol").path_params() == ("symbol",)
        assert get_operation("get_trade").path_params() == ("trade_id",)
        assert get_operation("get_account").path_params() == ()

    def test_unknown_operation_raises(self):
        """Test lookup of an unknown name."""
        with pytest.raises(ValueError, match="Unknown operation"):
            get_operation("get_everything")


# ============================================================
# URL ASSEMBLY
# ============================================================

class TestUrlAssembly:
    """Tests for URL construction."""

    def test_slash_in_symbol_is_encoded(self):
        """Test EUR/USD becomes EUR%2FUSD."""
        url = build_url("http://x", get_operation("get_public_symbol"), {"symbol": "EUR/USD"})

        assert url == "http://x/api/v2/public/symbol/EUR%2FUSD"

    def test_reserved_characters_are_encoded(self):
        """Test spaces, '#' and '?' cannot break out of the path segment."""
        assert encode_path_param("A B#?") == "A%20B%23%3F"

    def test_trailing_slash_on_base(self):
        """Test a trailing slash on the base address is not doubled."""
        url = build_url("http://x/", get_operation("get_account"))

        assert url == "http://x/api/v2/account"

    def test_query_order_and_none_skipped(self):
        """Test query parameters keep order and skip None values."""
        query = build_query([("type", "Close"), ("id", "T1"), ("amount", None)])

        assert query == "type=Close&id=T1"

    def test_query_values_encoded(self):
        """Test query values are percent-encoded."""
        assert build_query([("id", "a&b")]) == "id=a%26b"

    def test_missing_path_param_raises(self):
        """Test missing placeholder value."""
        with pytest.raises(ValueError, match="requires 'symbol'"):
            build_url("http://x", get_operation("get_symbol"), {})

    def test_empty_path_param_raises(self):
        """Test an empty value would address the collection endpoint instead."""
        with pytest.raises(ValueError, match="non-empty"):
            build_url("http://x", get_operation("get_trade"), {"trade_id": ""})

    @pytest.mark.parametrize(
        "value, expected",
        [
            (5, "5"),
            (5.0, "5"),
            (0.5, "0.5"),
            (Decimal("10.50"), "10.5"),
            (Decimal("1E+3"), "1000"),
            (True, "true"),
            ("T123", "T123"),
        ],
    )
    def test_format_value(self, value, expected):
        """Test values render like JavaScript string concatenation."""
        assert format_value(value) == expected


# ============================================================
# REQUEST BODIES
# ============================================================

class TestRequestBodies:
    """Tests for typed request bodies."""

    def test_create_request_camel_case_and_order(self):
        """Test wire names and documented field order."""
        request = TradeCreateRequest(
            type=TradeType.LIMIT,
            side=TradeSide.SELL,
            symbol="EURUSD",
            amount=1000,
            price=1.1,
            client_id="c-1",
            stop_loss=1.2,
            immediate_or_cancel=False,
        )

        data = request.to_dict()

        assert list(data) == [
            "clientId", "type", "side", "symbol", "price", "amount",
            "stopLoss", "immediateOrCancel",
        ]
        assert data["type"] == "Limit"
        assert data["side"] == "Sell"
        assert data["immediateOrCancel"] is False

    def test_none_fields_omitted(self):
        """Test unset optional fields are not sent."""
        request = TradeCreateRequest(type="Market", side="Buy", symbol="EURUSD", amount=1000)

        assert request.to_dict() == {
            "type": "Market",
            "side": "Buy",
            "symbol": "EURUSD",
            "amount": 1000,
        }

    def test_string_enums_coerced(self):
        """Test plain strings are accepted for enum fields."""
        request = TradeCreateRequest(type="Stop", side="Buy", symbol="X", amount=1, price=2)

        assert request.type is TradeType.STOP
        assert request.side is TradeSide.BUY

    def test_invalid_enum_rejected(self):
        """Test unknown trade type."""
        with pytest.raises(ValueError):
            TradeCreateRequest(type="Iceberg", side="Buy", symbol="X", amount=1)

    def test_limit_requires_price(self):
        """Test Limit trades without price are rejected locally."""
        with pytest.raises(ValueError, match="price is required"):
            TradeCreateRequest(type=TradeType.LIMIT, side=TradeSide.BUY, symbol="X", amount=1)

    def test_modify_request(self):
        """Test modify body."""
        request = TradeModifyRequest(id=42, take_profit=Decimal("1.25"), comment="tp")

        assert request.to_dict() == {"id": 42, "takeProfit": 1.25, "comment": "tp"}

    def test_history_request(self):
        """Test history body with direction."""
        request = TradeHistoryRequest(
            timestamp_from=1,
            timestamp_to=2,
            request_direction="Backward",
            request_from_id="h-9",
        )

        assert request.request_direction is RequestDirection.BACKWARD
        assert request.to_dict() == {
            "timestampFrom": 1,
            "timestampTo": 2,
            "requestDirection": "Backward",
            "requestFromId": "h-9",
        }

    def test_empty_history_request(self):
        """Test an unfiltered history request is an empty object."""
        assert TradeHistoryRequest().to_dict() == {}

    def test_body_to_dict_passthrough(self):
        """Test plain dicts pass through unchanged."""
        body = {"anything": 1}

        assert body_to_dict(body) is body
