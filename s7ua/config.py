"""Configuration for connections to an S7 OPC UA server."""

from dataclasses import dataclass
from typing import Optional

from .types import DEFAULT_MAX_DISCOVERY_DEPTH


@dataclass(frozen=True)
class ClientConfig:
    """Session pool and discovery settings.

    The endpoint URL is not part of the config, it is passed to
    :meth:`s7ua.pool.SessionPool.initialize` and :meth:`s7ua.client.S7UaClient.connect`.
    """

    max_sessions: int = 5
    max_discovery_depth: int = DEFAULT_MAX_DISCOVERY_DEPTH
    vendor_namespace_index: int = 3
    application_name: str = "s7ua"
    application_uri: str = "urn:s7ua:client"
    request_timeout: float = 4.0
    session_timeout: float = 60.0
    username: Optional[str] = None
    password: Optional[str] = None
    security_string: Optional[str] = None

    def __post_init__(self) -> None:
        if self.max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        if self.max_discovery_depth < 0:
            raise ValueError("max_discovery_depth must be non-negative")
        if not (0 <= self.vendor_namespace_index < 65536):
            raise ValueError("vendor_namespace_index must be in range 0-65535")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if self.session_timeout <= 0:
            raise ValueError("session_timeout must be positive")
        if self.password is not None and self.username is None:
            raise ValueError("password given without username")
