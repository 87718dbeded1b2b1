"""
Push Channel Package.

Real-time WebSocket session with per-session request correlation.
"""

from .session import (
    ConnectionState,
    PushConfig,
    PushRequestError,
    PushSession,
)


__all__ = [
    "ConnectionState",
    "PushConfig",
    "PushRequestError",
    "PushSession",
]
