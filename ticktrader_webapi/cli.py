"""
TickTrader Web API - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line access to every Web API operation.

- argparse subcommand per operation
- Configuration from environment / .env
- Prints the HTTP status and the JSON response body

============================================================
USAGE
============================================================
ticktrader-webapi get-public-symbol EUR/USD
ticktrader-webapi get-account
ticktrader-webapi create-trade --body '{"type":"Market","side":"Buy","symbol":"EURUSD","amount":1000}'
ticktrader-webapi create-trade --side Buy --symbol EURUSD --amount 1000
ticktrader-webapi close-trade 12345 --amount 500
ticktrader-webapi get-trade-history --body @history.json

EXIT CODES:
  0  2xx response
  1  HTTP or transport error
  2  configuration, credential or argument error

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from .client.config import WebApiConfig
from .client.endpoints import OPERATIONS, Operation
from .client.factory import create_client
from .client.transport import HttpResponse
from .client.types import TradeCreateRequest, TradeSide, TradeType
from .core.exceptions import (
    ConfigurationError,
    CredentialError,
    HttpError,
    TransportError,
)


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REQUEST_FAILED = 1
EXIT_CONFIG_ERROR = 2

# Arguments beyond path placeholders
_EXTRA_POSITIONALS: Dict[str, List[str]] = {
    "cancel_trade": ["trade_id"],
    "close_trade": ["trade_id"],
    "close_by_trade": ["trade_id", "by_trade_id"],
}

_BODY_REQUIRED = {"modify_trade"}


def _decimal(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid number: {text!r}") from None


# create-trade flags mapped onto TradeCreateRequest fields
_TRADE_FLAGS = [
    ("--client-id", "client_id", str),
    ("--price", "price", _decimal),
    ("--stop-loss", "stop_loss", _decimal),
    ("--take-profit", "take_profit", _decimal),
    ("--expired-timestamp", "expired_timestamp", int),
    ("--comment", "comment", str),
]


def _command_name(operation: Operation) -> str:
    return operation.name.replace("_", "-")


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ticktrader-webapi",
        description="TickTrader Web API client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Credentials are read from TICKTRADER_WEB_API_ID, TICKTRADER_WEB_API_KEY
and TICKTRADER_WEB_API_SECRET (or a .env file). Public commands need
only TICKTRADER_WEB_API_ADDRESS or --address.
        """,
    )

    parser.add_argument(
        "--address",
        type=str,
        default=None,
        help="Web API address (overrides TICKTRADER_WEB_API_ADDRESS)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    for operation in OPERATIONS.values():
        sub = subparsers.add_parser(
            _command_name(operation),
            help=f"{operation.method} {operation.path}",
        )
        sub.set_defaults(operation=operation.name)

        for name in operation.path_params() + tuple(_EXTRA_POSITIONALS.get(operation.name, [])):
            sub.add_argument(name)

        if operation.name == "close_trade":
            sub.add_argument("--amount", type=float, default=None, help="Amount to close")

        if operation.name == "create_trade":
            _add_trade_flags(sub)

        if operation.has_body:
            sub.add_argument(
                "--body",
                required=operation.name in _BODY_REQUIRED,
                default=None,
                help="JSON request body, or @path to read it from a file",
            )

    return parser


def _add_trade_flags(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--type", choices=[t.value for t in TradeType], default=TradeType.MARKET.value)
    sub.add_argument("--side", choices=[s.value for s in TradeSide], default=None)
    sub.add_argument("--symbol", default=None)
    sub.add_argument("--amount", type=_decimal, default=None)
    sub.add_argument("--ioc", dest="immediate_or_cancel", action="store_true", default=None,
                     help="Immediate-or-cancel")
    for flag, dest, kind in _TRADE_FLAGS:
        sub.add_argument(flag, dest=dest, type=kind, default=None)


def _trade_from_flags(args: argparse.Namespace) -> TradeCreateRequest:
    if args.side is None or args.amount is None:
        raise ValueError("create-trade needs --body, or --side, --symbol and --amount")
    return TradeCreateRequest(
        type=args.type,
        side=args.side,
        symbol=args.symbol,
        amount=args.amount,
        immediate_or_cancel=args.immediate_or_cancel,
        **{dest: getattr(args, dest) for _, dest, _ in _TRADE_FLAGS},
    )


def _load_body(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if raw is None:
        return None
    if raw.startswith("@"):
        with open(raw[1:], "r", encoding="utf-8") as f:
            raw = f.read()
    return json.loads(raw)


def build_call_kwargs(args: argparse.Namespace) -> Dict[str, Any]:
    """Map parsed arguments onto the client method's keyword arguments."""
    operation = OPERATIONS[args.operation]
    kwargs: Dict[str, Any] = {}

    for name in operation.path_params() + tuple(_EXTRA_POSITIONALS.get(operation.name, [])):
        kwargs[name] = getattr(args, name)

    if operation.name == "close_trade":
        kwargs["amount"] = args.amount

    if operation.has_body:
        body = _load_body(args.body)
        if body is None and operation.name == "create_trade":
            body = _trade_from_flags(args)
        if body is not None or operation.name in _BODY_REQUIRED:
            kwargs["request"] = body

    return kwargs


def _print_response(response: HttpResponse) -> None:
    print(f"HTTP {response.status}")
    try:
        payload = response.json()
    except ValueError:
        print(response.text())
        return
    if payload is not None:
        print(json.dumps(payload, indent=2, ensure_ascii=False))


# ============================================================
# ENTRY POINT
# ============================================================

async def run(args: argparse.Namespace, config: WebApiConfig) -> int:
    """Execute one command. Returns the process exit code."""
    result = create_client(config)
    if not result.ok:
        print(f"Configuration error: {result.error.message}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    async with result.client as client:
        method = getattr(client, args.operation)
        try:
            response = await method(**build_call_kwargs(args))
        except CredentialError as e:
            print(f"Credential error: {e.message}", file=sys.stderr)
            return EXIT_CONFIG_ERROR
        except HttpError as e:
            logger.debug(e.to_log_format())
            print(f"HTTP {e.status}", file=sys.stderr)
            print(e.text, file=sys.stderr)
            return EXIT_REQUEST_FAILED
        except TransportError as e:
            logger.debug(e.to_log_format())
            print(f"Transport error: {e.message}", file=sys.stderr)
            return EXIT_REQUEST_FAILED
        except (ValueError, OSError) as e:
            # Invalid flags or JSON, or an unreadable --body @file
            print(f"Invalid arguments: {e}", file=sys.stderr)
            return EXIT_CONFIG_ERROR

    _print_response(response)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = WebApiConfig.from_env()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.address:
        config.address = args.address
    if args.timeout is not None:
        config.timeout_seconds = args.timeout

    return asyncio.run(run(args, config))


if __name__ == "__main__":
    sys.exit(main())
