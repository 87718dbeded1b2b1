"""
Web API Client - Request Signer.

============================================================
PURPOSE
============================================================
HMAC-SHA256 request signing for private Web API endpoints.

SIGNATURE:
    BASE64(HMAC-SHA256(secret,
        timestamp + id + key + METHOD + url + body))

HEADER:
    Authorization: HMAC {id}:{key}:{timestamp}:{signature}

The string is signed over exactly what the transport sends:
the fully assembled URL (query string included) and the
serialized JSON body. An absent body contributes nothing.

============================================================
"""

import base64
import hashlib
import hmac
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import urlsplit

from ..core.clock import ClockProtocol, default_clock
from ..core.exceptions import CredentialError


AUTH_SCHEME = "HMAC"
AUTHORIZATION_HEADER = "Authorization"

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "DELETE"})


# ============================================================
# DATA MODEL
# ============================================================

@dataclass(frozen=True)
class Credentials:
    """Web API id, key and secret. Key and secret never appear in repr."""

    id: str
    key: str = field(repr=False)
    secret: str = field(repr=False)

    def validate(self) -> None:
        """Raise CredentialError for the first empty credential."""
        if not self.id:
            raise CredentialError("id")
        if not self.key:
            raise CredentialError("key")
        if not self.secret:
            raise CredentialError("secret")


@dataclass(frozen=True)
class SigningContext:
    """Method, absolute URL and serialized body of one outgoing request."""

    method: str
    url: str
    body: Optional[str] = None

    def __post_init__(self):
        method = (self.method or "").upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method!r}")
        parts = urlsplit(self.url or "")
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Signing requires an absolute URL: {self.url!r}")
        object.__setattr__(self, "method", method)


@dataclass(frozen=True)
class AuthHeader:
    """Derived authorization header for a single request."""

    id: str
    key: str = field(repr=False)
    timestamp_ms: int = 0
    signature: str = field(default="", repr=False)
    scheme: str = AUTH_SCHEME

    @property
    def value(self) -> str:
        return f"{self.scheme} {self.id}:{self.key}:{self.timestamp_ms}:{self.signature}"

    def as_headers(self) -> Dict[str, str]:
        return {AUTHORIZATION_HEADER: self.value}

    def __str__(self) -> str:
        return self.value


# ============================================================
# SIGNING
# ============================================================

def build_signing_string(
    timestamp_ms: int,
    context: SigningContext,
    credentials: Credentials,
) -> str:
    """
    Build the canonical string covered by the HMAC.

    Args:
        timestamp_ms: Epoch milliseconds embedded in the header
        context: Request method, URL and body
        credentials: Web API credentials

    Returns:
        Concatenation without separators
    """
    return (
        f"{timestamp_ms}"
        f"{credentials.id}"
        f"{credentials.key}"
        f"{context.method}"
        f"{context.url}"
        f"{context.body if context.body is not None else ''}"
    )


def compute_signature(secret: str, message: str) -> str:
    """Base64 of the raw HMAC-SHA256 digest."""
    digest = hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def sign(
    context: SigningContext,
    credentials: Credentials,
    clock: Optional[ClockProtocol] = None,
) -> AuthHeader:
    """
    Sign a request.

    Args:
        context: Fully assembled request
        credentials: Web API credentials
        clock: Time source (system clock by default)

    Returns:
        AuthHeader to attach under Authorization

    Raises:
        CredentialError: If id, key or secret is empty
    """
    credentials.validate()

    timestamp_ms = (clock or default_clock()).timestamp_ms()
    message = build_signing_string(timestamp_ms, context, credentials)

    return AuthHeader(
        id=credentials.id,
        key=credentials.key,
        timestamp_ms=timestamp_ms,
        signature=compute_signature(credentials.secret, message),
    )


__all__ = [
    "AUTH_SCHEME",
    "AUTHORIZATION_HEADER",
    "HTTP_METHODS",
    "Credentials",
    "SigningContext",
    "AuthHeader",
    "build_signing_string",
    "compute_signature",
    "sign",
]
