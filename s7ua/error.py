"""
S7 OPC UA error handling and exception classes.

Soft failures (a disconnected session, a Bad write status) are logged by the
caller and reported as values. Everything below is raised.
"""

from typing import Optional


class S7UaError(Exception):
    """Base exception for all s7ua errors."""

    def __init__(self, message: str, error_code: Optional[int] = None):
        super().__init__(message)
        self.error_code = error_code


class SessionError(S7UaError):
    """Raised by a session when a browse, read or write service fails."""

    pass


class ConversionError(S7UaError, ValueError):
    """Raised when a value can't be converted between wire and S7 representation."""

    pass


class ResourceExhaustionError(S7UaError):
    """Raised when the session pool can't create all of its sessions."""

    pass


class PoolNotInitializedError(S7UaError):
    """Raised when the session pool is used before it was initialized."""

    pass


class PoolClosedError(S7UaError):
    """Raised when the session pool is used after it was closed."""

    pass


class NotFoundError(S7UaError, KeyError):
    """Raised when a node id or UDT definition is missing."""

    def __str__(self) -> str:
        # KeyError would quote the message
        return str(self.args[0]) if self.args else ""
