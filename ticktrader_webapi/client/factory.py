"""
Web API Client - Factory.

============================================================
PURPOSE
============================================================
Non-raising client construction.

create_client() validates a WebApiConfig and returns a
ClientResult holding either the client or the configuration
error, so callers can branch on the result instead of
catching exceptions.

============================================================
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.clock import ClockProtocol
from ..core.exceptions import ConfigurationError
from .config import WebApiConfig
from .transport import HttpTransport
from .web_client import TickTraderWebClient


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientResult:
    """Outcome of create_client()."""

    client: Optional[TickTraderWebClient] = None
    error: Optional[ConfigurationError] = None

    @property
    def ok(self) -> bool:
        return self.client is not None

    def unwrap(self) -> TickTraderWebClient:
        """Return the client or raise the stored error."""
        if self.client is None:
            raise self.error or ConfigurationError("Client was not created")
        return self.client


def create_client(
    config: WebApiConfig,
    transport: Optional[HttpTransport] = None,
    clock: Optional[ClockProtocol] = None,
) -> ClientResult:
    """
    Create a client from configuration without raising.

    Args:
        config: Web API configuration
        transport: HTTP transport override
        clock: Clock override

    Returns:
        ClientResult with client or error set
    """
    problems = config.validate()
    if problems:
        logger.warning(f"Invalid Web API configuration: {'; '.join(problems)}")
        return ClientResult(
            error=ConfigurationError(
                "; ".join(problems),
                context={"problems": problems},
            )
        )

    if not config.has_credentials:
        logger.info("No Web API credentials configured; only public endpoints will work")

    return ClientResult(
        client=TickTraderWebClient.from_config(config, transport=transport, clock=clock)
    )


def create_client_from_env(
    prefix: str = "TICKTRADER_",
    transport: Optional[HttpTransport] = None,
) -> ClientResult:
    """Load WebApiConfig from the environment and create a client."""
    try:
        config = WebApiConfig.from_env(prefix=prefix)
    except ConfigurationError as e:
        return ClientResult(error=e)
    return create_client(config, transport=transport)


__all__ = [
    "ClientResult",
    "create_client",
    "create_client_from_env",
]
