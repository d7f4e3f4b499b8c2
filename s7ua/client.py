"""
The client for S7 PLCs with an OPC UA server.
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from .access import NodeValueAccess
from .config import ClientConfig
from .converters import TypeConverter, get_converter
from .discovery import StructureDiscovery
from .pool import SessionPool
from .structure import GlobalDataBlock, InstanceDataBlock, Node, StructureElement, Variable
from .types import RootNode, S7DataType
from .ua.asyncua_session import create_session
from .ua.session import Session, SessionFactory
from .udt.definition import UdtDefinition
from .udt.registry import UdtTypeRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class S7UaClient:
    """
    An async client for the OPC UA server of S7-1200 and S7-1500 PLCs.

    Every call borrows one session of the pool for its duration, so up to
    ``config.max_sessions`` calls run at the same time.

    Examples:
        >>> import s7ua
        >>> client = s7ua.S7UaClient()
        >>> await client.connect("opc.tcp://192.168.0.1:4840")
        >>> blocks = await client.get_all_global_data_blocks()
        >>> block = await client.discover_node(blocks[0])
        >>> block = await client.read_node_values(block, "DataBlocksGlobal")
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session_factory: SessionFactory = create_session,
        udt_registry: Optional[UdtTypeRegistry] = None,
    ):
        self.config = config or ClientConfig()
        self.udt_registry = udt_registry or UdtTypeRegistry()
        self._session_factory = session_factory
        self._pool = SessionPool(session_factory, self.config.max_sessions)
        self._discovery = StructureDiscovery(
            self.udt_registry, self.config.max_discovery_depth, self.config.vendor_namespace_index
        )
        self._access = NodeValueAccess(self.udt_registry)
        self.endpoint: Optional[str] = None

    def __repr__(self) -> str:
        return f"<s7ua.S7UaClient {self.endpoint or 'not connected'}>"

    async def __aenter__(self) -> "S7UaClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.disconnect()

    @property
    def pool(self) -> SessionPool:
        return self._pool

    @property
    def is_connected(self) -> bool:
        return self._pool.initialized and not self._pool.closed

    async def connect(self, endpoint: str) -> "S7UaClient":
        """Create the session pool for `endpoint`.

        Calling it again replaces all sessions, e.g. after the PLC restarted.

        Raises:
            ResourceExhaustionError: if not all sessions could be created.
        """
        logger.info(f"connecting to {endpoint} with {self.config.max_sessions} sessions")
        await self._pool.initialize(self.config, endpoint)
        self.endpoint = endpoint
        return self

    async def disconnect(self) -> None:
        """Close all sessions. The client can connect again afterwards."""
        if not self._pool.initialized:
            return
        await self._pool.close()
        self._pool = SessionPool(self._session_factory, self.config.max_sessions)
        logger.info(f"disconnected from {self.endpoint}")
        self.endpoint = None

    async def _execute(self, operation: Callable[[Session], Awaitable[T]]) -> T:
        return await self._pool.execute_with_session(operation)

    # structure

    async def get_all_global_data_blocks(self) -> List[GlobalDataBlock]:
        return await self._execute(self._discovery.get_all_global_data_blocks)

    async def get_all_instance_data_blocks(self) -> List[InstanceDataBlock]:
        return await self._execute(self._discovery.get_all_instance_data_blocks)

    async def _get_structure_element(self, root: RootNode) -> Optional[StructureElement]:
        return await self._execute(lambda session: self._discovery.get_structure_element(session, root))

    async def get_memory(self) -> Optional[StructureElement]:
        return await self._get_structure_element(RootNode.MEMORY)

    async def get_inputs(self) -> Optional[StructureElement]:
        return await self._get_structure_element(RootNode.INPUTS)

    async def get_outputs(self) -> Optional[StructureElement]:
        return await self._get_structure_element(RootNode.OUTPUTS)

    async def get_timers(self) -> Optional[StructureElement]:
        return await self._get_structure_element(RootNode.TIMERS)

    async def get_counters(self) -> Optional[StructureElement]:
        return await self._get_structure_element(RootNode.COUNTERS)

    async def discover_node(self, node: Node) -> Node:
        """Return `node` with everything below it discovered."""
        return await self._execute(lambda session: self._discovery.discover(session, node))

    # values

    async def read_node_values(self, node: Node, root_context: Optional[str] = None) -> Node:
        """Return `node` with the current values of all its variables."""
        return await self._execute(lambda session: self._access.read_node_values(session, node, root_context))

    async def write_variable(self, node_id: str, value: Any, s7_type: S7DataType) -> bool:
        """Write a python value to a node as `s7_type`.

        Returns:
            True if the server accepted the value.

        Raises:
            ConversionError: if `value` doesn't fit `s7_type`.
        """
        return await self._execute(lambda session: self._access.write_variable(session, node_id, value, s7_type))

    async def write_node_variable(self, variable: Variable, value: Any) -> bool:
        """Write to a discovered variable, struct values member by member."""
        return await self._execute(lambda session: self._access.write_node(session, variable, value))

    async def write_raw_variable(self, node_id: str, raw: Any, s7_type: Optional[S7DataType] = None) -> bool:
        """Write a value that is already in its wire representation."""
        return await self._execute(lambda session: self._access.write_raw(session, node_id, raw, s7_type))

    # types

    def get_converter(self, s7_type: S7DataType, fallback_type: type = object) -> TypeConverter:
        return get_converter(s7_type, fallback_type)

    def register_udt_converter(self, converter) -> None:
        """Register a :class:`~s7ua.converters.CustomUdtConverter` for its UDT type."""
        self.udt_registry.register_custom_converter(converter)

    def get_udt_definition(self, name: str) -> UdtDefinition:
        """Raises NotFoundError if no variable of UDT `name` was discovered yet."""
        return self.udt_registry.require_udt_definition(name)
