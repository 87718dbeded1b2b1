"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines all custom exceptions for the Web API client.

- Provides a flat, explicit exception hierarchy
- Carries context for debugging
- Never carries credential material

============================================================
EXCEPTION HIERARCHY
============================================================
WebApiError (base)
├── ConfigurationError
├── CredentialError
├── HttpError
└── TransportError

============================================================
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# BASE EXCEPTION
# ============================================================

class WebApiError(Exception):
    """
    Base exception for all Web API client errors.

    All exceptions carry:
    - message: human-readable description
    - context: debugging details (never credentials)
    - cause: the underlying exception, if any
    - timestamp: when the error occurred
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)

        self.message = message
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }

    def to_log_format(self) -> str:
        """Format exception for structured logging."""
        ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        text = f"{type(self).__name__}: {self.message}"
        if ctx_str:
            text = f"{text} | {ctx_str}"
        return text


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(WebApiError):
    """Client configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)
        self.config_key = config_key


class CredentialError(WebApiError):
    """A Web API credential (id, key or secret) is missing."""

    def __init__(self, field: str):
        super().__init__(
            message=f"TickTrader Web API {field.capitalize()} should be valid",
            context={"field": field},
        )
        self.field = field


# ============================================================
# TRANSPORT ERRORS
# ============================================================

class HttpError(WebApiError):
    """The server answered with a non-2xx status."""

    def __init__(
        self,
        status: int,
        body: bytes = b"",
        method: Optional[str] = None,
        url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.status = status
        self.body = body
        self.method = method
        self.url = url
        self.headers = dict(headers or {})

        super().__init__(
            message=f"HTTP {status} for {method} {url}: {self.text[:200]}",
            context={"status": status, "method": method, "url": url},
        )

    @property
    def text(self) -> str:
        """Response body decoded as UTF-8."""
        return self.body.decode("utf-8", errors="replace")


class TransportError(WebApiError):
    """Connection, TLS or timeout failure below the HTTP layer."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
        is_timeout: bool = False,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            message,
            context={"method": method, "url": url, "is_timeout": is_timeout},
            cause=cause,
        )
        self.method = method
        self.url = url
        self.is_timeout = is_timeout


__all__ = [
    "WebApiError",
    "ConfigurationError",
    "CredentialError",
    "HttpError",
    "TransportError",
]
