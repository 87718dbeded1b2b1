"""
Web API Client - Configuration.

============================================================
PURPOSE
============================================================
Connection settings and credentials for the Web API client.

ENVIRONMENT:
- TICKTRADER_WEB_API_ADDRESS
- TICKTRADER_WEB_API_ID
- TICKTRADER_WEB_API_KEY
- TICKTRADER_WEB_API_SECRET
- TICKTRADER_TIMEOUT_SECONDS (default 30)
- TICKTRADER_VERIFY_SSL (default true)

A .env file in the working directory is loaded first.

============================================================
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlsplit

from dotenv import load_dotenv

from ..core.exceptions import ConfigurationError
from .signer import Credentials


DEFAULT_ENV_PREFIX = "TICKTRADER_"
DEFAULT_TIMEOUT_SECONDS = 30.0

_TRUE_VALUES = {"1", "true", "yes", "on"}


# ============================================================
# WEB API CONFIGURATION
# ============================================================

@dataclass
class WebApiConfig:
    """
    Web API connection configuration.

    Public endpoints need only the address; private endpoints
    need id, key and secret as well.
    """

    address: str
    """Base address, e.g. https://ttlivewebapi.example.com:8443"""

    web_api_id: str = ""
    web_api_key: str = field(default="", repr=False)
    web_api_secret: str = field(default="", repr=False)

    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    """Total timeout for one HTTP request."""

    verify_ssl: bool = True
    """Verify the server TLS certificate."""

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_ENV_PREFIX,
        dotenv_path: Optional[str] = None,
    ) -> "WebApiConfig":
        """
        Create config from environment variables.

        Args:
            prefix: Environment variable prefix
            dotenv_path: Explicit .env file (default: search from cwd)

        Returns:
            WebApiConfig (not validated)
        """
        load_dotenv(dotenv_path)

        timeout_raw = os.getenv(f"{prefix}TIMEOUT_SECONDS")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_SECONDS
        except ValueError:
            raise ConfigurationError(
                f"Invalid {prefix}TIMEOUT_SECONDS",
                config_key=f"{prefix}TIMEOUT_SECONDS",
                actual_value=timeout_raw,
            ) from None

        verify_raw = os.getenv(f"{prefix}VERIFY_SSL")
        verify_ssl = True if verify_raw is None else verify_raw.strip().lower() in _TRUE_VALUES

        return cls(
            address=os.getenv(f"{prefix}WEB_API_ADDRESS", ""),
            web_api_id=os.getenv(f"{prefix}WEB_API_ID", ""),
            web_api_key=os.getenv(f"{prefix}WEB_API_KEY", ""),
            web_api_secret=os.getenv(f"{prefix}WEB_API_SECRET", ""),
            timeout_seconds=timeout,
            verify_ssl=verify_ssl,
        )

    @property
    def credentials(self) -> Credentials:
        return Credentials(
            id=self.web_api_id,
            key=self.web_api_key,
            secret=self.web_api_secret,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.web_api_id and self.web_api_key and self.web_api_secret)

    def validate(self) -> List[str]:
        """
        Check the configuration.

        Credentials are not required here; they are checked
        when a private request is signed.

        Returns:
            List of problems (empty when valid)
        """
        problems = []

        if not self.address:
            problems.append("address is required")
        else:
            parts = urlsplit(self.address)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                problems.append(f"address must be an absolute http(s) URL: {self.address!r}")
            elif parts.query or parts.fragment:
                problems.append("address must not contain a query or fragment")

        if self.timeout_seconds <= 0:
            problems.append("timeout_seconds must be positive")

        return problems


def validate_address(address: Optional[str]) -> None:
    """Raise ConfigurationError when the address is missing."""
    if not address:
        raise ConfigurationError(
            "TickTrader Web API address should be valid",
            config_key="address",
        )


__all__ = [
    "DEFAULT_ENV_PREFIX",
    "DEFAULT_TIMEOUT_SECONDS",
    "WebApiConfig",
    "validate_address",
]
