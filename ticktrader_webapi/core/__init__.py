"""
Core Module.

Clock abstraction and exception hierarchy shared by the REST client
and the push session.
"""

from .clock import (
    ClockProtocol,
    SystemClock,
    MockClock,
    to_millis,
    from_millis,
    default_clock,
)
from .exceptions import (
    WebApiError,
    ConfigurationError,
    CredentialError,
    HttpError,
    TransportError,
)


__all__ = [
    # Clock
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "to_millis",
    "from_millis",
    "default_clock",
    # Exceptions
    "WebApiError",
    "ConfigurationError",
    "CredentialError",
    "HttpError",
    "TransportError",
]
