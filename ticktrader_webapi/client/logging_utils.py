"""
Web API Client - Secure Logging Utilities.

============================================================
PURPOSE
============================================================
Secure logging for Web API requests with:
- Authorization header masking
- Query parameter masking
- Body hashing instead of body logging
- Structured JSON log entries

============================================================
SECURITY REQUIREMENTS
============================================================
1. NEVER log the Web API key or secret
2. Mask the Authorization header (it embeds id and key)
3. Log a hash of request bodies, never the body itself

============================================================
"""

import hashlib
import json
import logging
import re
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)


# ============================================================
# SENSITIVE DATA PATTERNS
# ============================================================

SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "set-cookie",
}

SENSITIVE_PARAMS = {
    "key",
    "secret",
    "password",
    "token",
    "signature",
}


# ============================================================
# MASKING FUNCTIONS
# ============================================================

def mask_value(value: str, show_chars: int = 4) -> str:
    """
    Mask a sensitive value, showing only first few chars.

    Args:
        value: Value to mask
        show_chars: Number of chars to show at start

    Returns:
        Masked value
    """
    if not value or len(value) <= show_chars:
        return "***"
    return f"{value[:show_chars]}...***"


def mask_headers(headers: Dict[str, str]) -> Dict[str, str]:
    """Return a copy of headers with sensitive values masked."""
    if not headers:
        return {}

    masked = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            masked[key] = mask_value(str(value))
        else:
            masked[key] = value
    return masked


def mask_url(url: str) -> str:
    """Mask sensitive query parameters in a URL."""
    if not url:
        return url

    for param in SENSITIVE_PARAMS:
        pattern = re.compile(f'([?&]{param}=)([^&]+)', re.IGNORECASE)
        url = pattern.sub(lambda m: f'{m.group(1)}***', url)

    return url


def hash_body(body: Optional[bytes]) -> Optional[str]:
    """Short SHA-256 fingerprint of a request body."""
    if body is None:
        return None
    return hashlib.sha256(body).hexdigest()[:16]


# ============================================================
# LOG ENTRY STRUCTURES
# ============================================================

@dataclass
class RequestLogEntry:
    """Structured log entry for requests."""

    timestamp: str
    operation: str
    method: str
    url: str
    request_id: str
    signed: bool
    headers: Dict[str, str] = None
    body_hash: str = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass
class ResponseLogEntry:
    """Structured log entry for responses."""

    timestamp: str
    operation: str
    request_id: str
    status_code: int
    latency_ms: float
    success: bool
    error_message: str = None
    response_preview: str = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


# ============================================================
# REQUEST LOGGER
# ============================================================

class RequestLogger:
    """
    Secure logger for Web API calls.

    Provides structured logging with automatic credential masking.
    """

    def __init__(self, name: str = "ticktrader", logger_name: str = None):
        """
        Initialize request logger.

        Args:
            name: Prefix for request ids and plain messages
            logger_name: Logger name (default: ticktrader_webapi.<name>)
        """
        self._name = name
        self._logger = logging.getLogger(logger_name or f"ticktrader_webapi.{name}")
        self._request_counter = 0

    def _generate_request_id(self) -> str:
        self._request_counter += 1
        return f"{self._name}-{self._request_counter}"

    def log_request(
        self,
        operation: str,
        method: str,
        url: str,
        signed: bool,
        headers: Dict[str, str] = None,
        body: Optional[bytes] = None,
    ) -> str:
        """
        Log an outgoing request.

        Returns:
            Request ID for correlation
        """
        request_id = self._generate_request_id()

        entry = RequestLogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            operation=operation,
            method=method,
            url=mask_url(url),
            request_id=request_id,
            signed=signed,
            headers=mask_headers(headers) if headers else None,
            body_hash=hash_body(body),
        )

        self._logger.debug(f"REQUEST: {entry.to_json()}")
        return request_id

    def log_response(
        self,
        operation: str,
        request_id: str,
        status_code: int,
        latency_ms: float,
        success: bool,
        error_message: str = None,
        response_body: Optional[bytes] = None,
    ) -> None:
        """Log an incoming response. Failures are logged at WARNING."""
        preview = None
        if response_body and not success:
            preview = response_body[:200].decode("utf-8", errors="replace")

        entry = ResponseLogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            operation=operation,
            request_id=request_id,
            status_code=status_code,
            latency_ms=round(latency_ms, 3),
            success=success,
            error_message=error_message[:200] if error_message else None,
            response_preview=preview,
        )

        if success:
            self._logger.debug(f"RESPONSE: {entry.to_json()}")
        else:
            self._logger.warning(f"RESPONSE_ERROR: {entry.to_json()}")


__all__ = [
    "SENSITIVE_HEADERS",
    "SENSITIVE_PARAMS",
    "mask_value",
    "mask_headers",
    "mask_url",
    "hash_body",
    "RequestLogEntry",
    "ResponseLogEntry",
    "RequestLogger",
]
