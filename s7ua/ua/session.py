"""
The boundary to the OPC UA session implementation.

Discovery, the read/write code and the session pool only talk to objects
implementing :class:`Session`. :mod:`s7ua.ua.asyncua_session` provides one
backed by asyncua, tests use an in-memory address space.
"""

from typing import Any, Awaitable, Callable, List, NamedTuple, Protocol, Sequence, Tuple

from asyncua import ua


class BrowseResult(NamedTuple):
    node_id: str
    display_name: str
    node_class: ua.NodeClass


class ReadResult(NamedTuple):
    value: Any
    status: int


class Session(Protocol):
    """A connected OPC UA session.

    The services raise :class:`s7ua.error.SessionError` when the request as a
    whole fails. Per item problems are reported through status codes.
    """

    @property
    def connected(self) -> bool: ...

    async def browse(self, node_id: str, node_class_mask: int) -> List[BrowseResult]:
        """Forward hierarchical references of `node_id`, limited to `node_class_mask`."""
        ...

    async def read(self, items: Sequence[Tuple[str, ua.AttributeIds]]) -> List[ReadResult]:
        """Read attributes, one result per item in the same order."""
        ...

    async def write(self, items: Sequence[Tuple[str, Any]]) -> List[int]:
        """Write Value attributes, one status per item in the same order."""
        ...

    async def close(self) -> None: ...


SessionFactory = Callable[[Any, str], Awaitable[Session]]
"""Creates a connected session from a :class:`~s7ua.config.ClientConfig` and an endpoint url."""
