"""
CLI Tests.

============================================================
PURPOSE
============================================================
Tests for argument parsing, call mapping and exit codes of the
ticktrader-webapi command.

============================================================
"""

import json
import logging
from unittest.mock import patch

import pytest

from ticktrader_webapi import cli
from ticktrader_webapi.client.config import WebApiConfig
from ticktrader_webapi.client.endpoints import OPERATIONS
from ticktrader_webapi.client.factory import ClientResult
from ticktrader_webapi.client.mock import MockTransport
from ticktrader_webapi.client.web_client import TickTraderWebClient


def client_result(transport, credentials=True):
    creds = ("A", "B", "C") if credentials else ()
    return ClientResult(client=TickTraderWebClient("http://x", *creds, transport=transport))


# ============================================================
# PARSER
# ============================================================

class TestParser:
    """Tests for create_parser and build_call_kwargs."""

    def test_subcommand_per_operation(self):
        parser = cli.create_parser()

        for name in OPERATIONS:
            args = parser.parse_args(
                [name.replace("_", "-")]
                + ["v"] * (len(OPERATIONS[name].path_params()) + len(cli._EXTRA_POSITIONALS.get(name, [])))
                + (["--body", "{}"] if name in ("create_trade", "modify_trade") else [])
            )
            assert args.operation == name

    def test_path_param(self):
        args = cli.create_parser().parse_args(["get-public-symbol", "EUR/USD"])

        assert cli.build_call_kwargs(args) == {"symbol": "EUR/USD"}

    def test_close_trade_amount(self):
        args = cli.create_parser().parse_args(["close-trade", "T1", "--amount", "5"])

        assert cli.build_call_kwargs(args) == {"trade_id": "T1", "amount": 5.0}

    def test_close_by_trade(self):
        args = cli.create_parser().parse_args(["close-by-trade", "T1", "T2"])

        assert cli.build_call_kwargs(args) == {"trade_id": "T1", "by_trade_id": "T2"}

    def test_inline_body(self):
        args = cli.create_parser().parse_args(["create-trade", "--body", '{"amount": 1}'])

        assert cli.build_call_kwargs(args) == {"request": {"amount": 1}}

    def test_body_from_file(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text('{"timestampFrom": 1}')

        args = cli.create_parser().parse_args(["get-trade-history", "--body", f"@{path}"])

        assert cli.build_call_kwargs(args) == {"request": {"timestampFrom": 1}}

    def test_optional_body_omitted(self):
        args = cli.create_parser().parse_args(["get-trade-history"])

        assert cli.build_call_kwargs(args) == {}

    def test_create_trade_flags(self):
        args = cli.create_parser().parse_args(
            ["create-trade", "--side", "Buy", "--symbol", "EURUSD", "--amount", "1000"]
        )

        request = cli.build_call_kwargs(args)["request"]

        assert request.to_dict() == {
            "type": "Market",
            "side": "Buy",
            "symbol": "EURUSD",
            "amount": 1000,
        }

    def test_create_trade_limit_flags(self):
        args = cli.create_parser().parse_args([
            "create-trade", "--type", "Limit", "--side", "Sell", "--symbol", "EURUSD",
            "--amount", "1000", "--price", "1.1", "--ioc", "--comment", "cli",
        ])

        data = cli.build_call_kwargs(args)["request"].to_dict()

        assert data["price"] == 1.1
        assert data["immediateOrCancel"] is True
        assert data["comment"] == "cli"

    def test_create_trade_without_body_or_flags(self):
        args = cli.create_parser().parse_args(["create-trade"])

        with pytest.raises(ValueError, match="needs --body"):
            cli.build_call_kwargs(args)

    def test_modify_trade_requires_body(self):
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args(["modify-trade"])


# ============================================================
# RUN
# ============================================================

class TestRun:
    """Tests for command execution and exit codes."""

    @pytest.mark.asyncio
    async def test_success(self, capsys):
        transport = MockTransport()
        transport.add_response("GET", "/api/v2/account", body={"Id": 7})
        args = cli.create_parser().parse_args(["get-account"])

        with patch("ticktrader_webapi.cli.create_client", return_value=client_result(transport)):
            code = await cli.run(args, WebApiConfig("http://x"))

        out = capsys.readouterr().out
        assert code == cli.EXIT_OK
        assert "HTTP 200" in out
        assert json.loads(out.split("\n", 1)[1]) == {"Id": 7}
        assert transport.closed is True

    @pytest.mark.asyncio
    async def test_http_error(self, capsys):
        transport = MockTransport()
        transport.add_response("GET", "/api/v2/account", status=401, body="denied")
        args = cli.create_parser().parse_args(["get-account"])

        with patch("ticktrader_webapi.cli.create_client", return_value=client_result(transport)):
            code = await cli.run(args, WebApiConfig("http://x"))

        err = capsys.readouterr().err
        assert code == cli.EXIT_REQUEST_FAILED
        assert "HTTP 401" in err
        assert "denied" in err

    @pytest.mark.asyncio
    async def test_transport_error(self, capsys):
        transport = MockTransport()
        transport.inject_error("Connection refused")
        args = cli.create_parser().parse_args(["get-public-all-symbols"])

        with patch("ticktrader_webapi.cli.create_client", return_value=client_result(transport)):
            code = await cli.run(args, WebApiConfig("http://x"))

        assert code == cli.EXIT_REQUEST_FAILED
        assert "Connection refused" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_failure_details_logged_at_debug(self, caplog):
        transport = MockTransport()
        transport.inject_error("Connection refused")
        args = cli.create_parser().parse_args(["get-public-all-symbols"])

        with patch("ticktrader_webapi.cli.create_client", return_value=client_result(transport)):
            with caplog.at_level(logging.DEBUG, logger="ticktrader_webapi.cli"):
                await cli.run(args, WebApiConfig("http://x"))

        messages = [r.getMessage() for r in caplog.records if r.name == "ticktrader_webapi.cli"]
        assert any(m.startswith("TransportError: Connection refused") for m in messages)

    @pytest.mark.asyncio
    async def test_missing_body_file(self, tmp_path, capsys):
        transport = MockTransport()
        missing = tmp_path / "missing.json"
        args = cli.create_parser().parse_args(["get-trade-history", "--body", f"@{missing}"])

        with patch("ticktrader_webapi.cli.create_client", return_value=client_result(transport)):
            code = await cli.run(args, WebApiConfig("http://x"))

        assert code == cli.EXIT_CONFIG_ERROR
        assert "Invalid arguments" in capsys.readouterr().err
        assert transport.call_count == 0
        assert transport.closed is True

    @pytest.mark.asyncio
    async def test_invalid_body_json(self, capsys):
        transport = MockTransport()
        args = cli.create_parser().parse_args(["get-trade-history", "--body", "{not json"])

        with patch("ticktrader_webapi.cli.create_client", return_value=client_result(transport)):
            code = await cli.run(args, WebApiConfig("http://x"))

        assert code == cli.EXIT_CONFIG_ERROR
        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_missing_credentials(self, capsys):
        transport = MockTransport()
        args = cli.create_parser().parse_args(["get-account"])

        with patch(
            "ticktrader_webapi.cli.create_client",
            return_value=client_result(transport, credentials=False),
        ):
            code = await cli.run(args, WebApiConfig("http://x"))

        assert code == cli.EXIT_CONFIG_ERROR
        assert "Id should be valid" in capsys.readouterr().err
        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_invalid_config(self, capsys):
        args = cli.create_parser().parse_args(["get-account"])

        code = await cli.run(args, WebApiConfig(""))

        assert code == cli.EXIT_CONFIG_ERROR
        assert "address is required" in capsys.readouterr().err

    def test_main_without_address(self, monkeypatch, capsys):
        monkeypatch.setenv("TICKTRADER_WEB_API_ADDRESS", "")

        code = cli.main(["get-public-trade-session"])

        assert code == cli.EXIT_CONFIG_ERROR
        assert "Configuration error" in capsys.readouterr().err
