"""
Whole PLC access on top of :class:`~s7ua.client.S7UaClient`: discover all
blocks and areas once, then read and write variables by full path.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Any, Callable, List, Optional

from .client import S7UaClient
from .converters import get_converter
from .datastore import GLOBAL_ROOT, INSTANCE_ROOT, DataStore
from .error import ConversionError
from .structure import Variable
from .types import S7DataType, StatusCode

logger = logging.getLogger(__name__)

ValueChangedHandler = Callable[[str, Variable, Variable], None]


class S7Service:
    """Keeps the structure and the last read values of a PLC.

    Examples:
        >>> service = S7Service()
        >>> await service.connect("opc.tcp://192.168.0.1:4840")
        >>> await service.discover_structure()
        >>> await service.read_all_variables()
        >>> service.get_variable("DataBlocksGlobal.Settings.Speed").value
        1200
    """

    def __init__(self, client: Optional[S7UaClient] = None, store: Optional[DataStore] = None):
        self.client = client or S7UaClient()
        self.store = store or DataStore()
        self._handlers: List[ValueChangedHandler] = []

    def on_value_changed(self, handler: ValueChangedHandler) -> ValueChangedHandler:
        """Register ``handler(path, old, new)``, called by :meth:`read_all_variables`."""
        self._handlers.append(handler)
        return handler

    async def connect(self, endpoint: str) -> None:
        await self.client.connect(endpoint)

    async def disconnect(self) -> None:
        await self.client.disconnect()

    async def discover_structure(self) -> None:
        """Discover all data blocks and areas and cache their variables."""
        client = self.client
        globals_, instances, inputs, outputs, memory, timers, counters = await asyncio.gather(
            client.get_all_global_data_blocks(),
            client.get_all_instance_data_blocks(),
            client.get_inputs(),
            client.get_outputs(),
            client.get_memory(),
            client.get_timers(),
            client.get_counters(),
        )
        global_blocks = await asyncio.gather(*(client.discover_node(block) for block in globals_))
        instance_blocks = await asyncio.gather(*(client.discover_node(block) for block in instances))
        areas = await asyncio.gather(*(self._discover_optional(area) for area in (inputs, outputs, memory, timers, counters)))
        self.store.set_structure(global_blocks, instance_blocks, *areas)
        self.store.build_cache()
        logger.info(
            f"discovered {len(global_blocks)} global and {len(instance_blocks)} instance data blocks, "
            f"{len(self.store.get_all_variables())} variables"
        )

    async def _discover_optional(self, node):
        if node is None:
            return None
        return await self.client.discover_node(node)

    async def _read_optional(self, node, root_context: Optional[str] = None):
        if node is None:
            return None
        return await self.client.read_node_values(node, root_context)

    async def read_all_variables(self) -> None:
        """Read every variable and notify the value changed handlers."""
        store = self.store
        previous = {path.lower(): variable for path, variable in store.items()}
        client = self.client
        global_blocks = await asyncio.gather(
            *(client.read_node_values(block, GLOBAL_ROOT) for block in store.global_data_blocks)
        )
        instance_blocks = await asyncio.gather(
            *(client.read_node_values(block, INSTANCE_ROOT) for block in store.instance_data_blocks)
        )
        areas = await asyncio.gather(
            *(self._read_optional(area) for area in (store.inputs, store.outputs, store.memory, store.timers, store.counters))
        )
        store.set_structure(global_blocks, instance_blocks, *areas)
        store.build_cache()

        if not self._handlers:
            return
        for path, variable in store.items():
            old = previous.get(path.lower())
            if old is not None and old.value != variable.value:
                for handler in self._handlers:
                    handler(path, old, variable)

    def get_variable(self, path: str) -> Optional[Variable]:
        return self.store.get_variable(path)

    def get_all_variables(self) -> List[Variable]:
        return self.store.get_all_variables()

    def find_variables_where(self, predicate: Callable[[Variable], bool]) -> List[Variable]:
        return self.store.find_variables_where(predicate)

    async def write_variable(self, path: str, value: Any) -> bool:
        """Write to the variable at `path`.

        Returns:
            False if there is no such variable or the server rejected the value.

        Raises:
            ConversionError: if `value` doesn't fit the variable's type.
        """
        variable = self.store.get_variable(path)
        if variable is None:
            logger.warning(f"No variable at {path}")
            return False
        return await self.client.write_node_variable(variable, value)

    async def update_variable_type(self, path: str, s7_type: S7DataType) -> bool:
        """Change how the variable at `path` is interpreted.

        The last raw value is converted again. Changing to STRUCT browses the
        members of the variable.
        """
        variable = self.store.get_variable(path)
        if variable is None:
            logger.warning(f"No variable at {path}")
            return False

        if s7_type.is_struct:
            shell = replace(variable.with_type(s7_type), struct_members=(), value=None)
            updated = await self.client.discover_node(shell)
            return self.store.update_variable(path, updated)

        updated = variable.with_type(s7_type)
        if variable.raw_value is not None:
            converter = get_converter(s7_type, type(variable.raw_value))
            try:
                updated = replace(
                    updated,
                    value=converter.from_protocol(variable.raw_value),
                    system_type=converter.target_type,
                )
            except ConversionError as e:
                logger.error(f"{path} can't be read as {s7_type.value}: {e}")
                updated = replace(updated, value=None, status_code=StatusCode.BAD)
        return self.store.update_variable(path, updated)
