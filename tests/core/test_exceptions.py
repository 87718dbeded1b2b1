"""
Exception Tests.

============================================================
PURPOSE
============================================================
Tests for the exception hierarchy and its log serialization.

============================================================
"""

from ticktrader_webapi.core.exceptions import (
    ConfigurationError,
    CredentialError,
    HttpError,
    TransportError,
    WebApiError,
)


class TestHierarchy:
    """Tests for the exception classes."""

    def test_all_derive_from_base(self):
        for cls in (ConfigurationError, CredentialError, HttpError, TransportError):
            assert issubclass(cls, WebApiError)

    def test_configuration_error_truncates_value(self):
        error = ConfigurationError("bad", config_key="address", actual_value="x" * 500)

        assert error.context["config_key"] == "address"
        assert len(error.context["actual_value"]) == 100

    def test_cause_recorded_in_context(self):
        cause = ConnectionResetError("reset")
        error = TransportError("failed", method="GET", url="http://x", cause=cause)

        assert error.cause is cause
        assert error.context["cause_type"] == "ConnectionResetError"
        assert error.context["cause_message"] == "reset"


class TestSerialization:
    """Tests for to_dict and to_log_format."""

    def test_to_dict(self):
        error = HttpError(status=404, body=b"missing", method="GET", url="http://x/api/v2/trade/1")

        data = error.to_dict()

        assert data["type"] == "HttpError"
        assert data["message"].startswith("HTTP 404 for GET http://x/api/v2/trade/1")
        assert data["context"] == {"status": 404, "method": "GET", "url": "http://x/api/v2/trade/1"}
        assert data["cause"] is None
        assert data["timestamp"] == error.timestamp.isoformat()

    def test_to_log_format(self):
        error = TransportError("Request timed out", method="GET", url="http://x", is_timeout=True)

        assert error.to_log_format() == (
            "TransportError: Request timed out | method=GET, url=http://x, is_timeout=True"
        )

    def test_to_log_format_without_context(self):
        assert WebApiError("plain").to_log_format() == "WebApiError: plain"

    def test_credential_error_names_field_only(self):
        error = CredentialError("secret")

        assert error.to_dict()["context"] == {"field": "secret"}
        assert error.to_log_format() == "CredentialError: TickTrader Web API Secret should be valid | field=secret"
