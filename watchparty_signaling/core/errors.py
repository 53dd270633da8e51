"""Exception types raised at the transport edge of the signaling service."""
from __future__ import annotations


class SignalingError(Exception):
    """Base class for signaling service errors."""


class InvalidFrameError(SignalingError):
    """Raised when an inbound WebSocket frame cannot be turned into an event."""


class ConnectionIdInUseError(SignalingError):
    """Raised when a session tries to attach with an id that is still live."""

    def __init__(self, connection_id: str) -> None:
        super().__init__(f"Connection id already attached: {connection_id}")
        self.connection_id = connection_id
