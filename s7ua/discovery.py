"""
Discovery of the PLC structure in the address space of the S7 OPC UA server.

The server publishes data blocks, their sections and struct members as
nodes. :class:`StructureDiscovery` browses below a shell node and returns a
new node with all children filled in. A struct member's type comes from its
DataType and ValueRank attributes, see :mod:`s7ua.ua.type_map`.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from asyncua import ua

from .error import SessionError
from .structure import (
    GlobalDataBlock,
    InstanceDataBlock,
    InstanceDbSection,
    Node,
    StructureElement,
    Variable,
    dispatch_table,
)
from .types import (
    DEFAULT_MAX_DISCOVERY_DEPTH,
    ICON_NODE_NAME,
    SECTION_IN_OUTS,
    SECTION_INPUTS,
    SECTION_OUTPUTS,
    SECTION_STATIC,
    NodeKind,
    RootNode,
    S7DataType,
)
from .ua.session import BrowseResult, Session
from .ua.status import is_good
from .ua.type_map import map_data_type, udt_type_name
from .udt.registry import UdtTypeRegistry

logger = logging.getLogger(__name__)

VARIABLE_CLASS = int(ua.NodeClass.Variable)
OBJECT_CLASS = int(ua.NodeClass.Object)

# the server can't tell timers and counters from words, the area they live in does
AREA_DEFAULT_TYPES: Dict[str, S7DataType] = {
    RootNode.COUNTERS.value: S7DataType.COUNTER,
    RootNode.TIMERS.value: S7DataType.S5TIME,
}

# display name of an instance DB section -> InstanceDataBlock field
SECTION_FIELDS: Dict[str, str] = {
    SECTION_INPUTS: "inputs",
    SECTION_OUTPUTS: "outputs",
    SECTION_IN_OUTS: "in_outs",
    SECTION_STATIC: "static",
}


class StructureDiscovery:
    """Walks the address space below shell nodes.

    Args:
        registry: receives a placeholder definition for every UDT type seen.
        max_depth: struct nesting (and instance nesting) beyond this depth is
            not browsed, the variable there becomes an UNKNOWN leaf.
        vendor_namespace_index: namespace of the S7 type ids and roots.
    """

    def __init__(
        self,
        registry: UdtTypeRegistry,
        max_depth: int = DEFAULT_MAX_DISCOVERY_DEPTH,
        vendor_namespace_index: int = 3,
    ):
        self.registry = registry
        self.max_depth = max_depth
        self.vendor_namespace_index = vendor_namespace_index
        self._discoverers = dispatch_table(
            {
                NodeKind.GLOBAL_DATA_BLOCK: self._discover_global_db,
                NodeKind.STRUCTURE_ELEMENT: self._discover_structure_element,
                NodeKind.INSTANCE_DATA_BLOCK: self._discover_instance_db,
                NodeKind.INSTANCE_DB_SECTION: self._discover_section,
                NodeKind.VARIABLE: self._discover_variable,
            }
        )

    async def discover(self, session: Session, shell: Node) -> Node:
        """Return `shell` with everything below it discovered.

        A disconnected session or a shell without node id gives back the
        shell unchanged.
        """
        if not session.connected:
            logger.warning(f"Session is not connected, can't discover {shell.display_name}")
            return shell
        if not shell.node_id:
            logger.warning(f"{shell.kind.value} {shell.display_name} has no node id, nothing to discover")
            return shell
        logger.debug(f"discovering {shell.kind.value} {shell.node_id}")
        return await self._discoverers[shell.kind](session, shell, 0)

    async def _discover_global_db(self, session: Session, block: GlobalDataBlock, depth: int) -> GlobalDataBlock:
        variables = await self._discover_variables(session, block.node_id, depth)
        return replace(block, variables=tuple(variables))

    async def _discover_structure_element(
        self, session: Session, element: StructureElement, depth: int
    ) -> StructureElement:
        variables = await self._discover_variables(session, element.node_id, depth)
        default_type = AREA_DEFAULT_TYPES.get(element.display_name or "")
        if default_type is not None:
            variables = [variable.with_type(default_type) for variable in variables]
        return replace(element, variables=tuple(variables))

    async def _discover_instance_db(self, session: Session, block: InstanceDataBlock, depth: int) -> InstanceDataBlock:
        sections = {}
        for reference in await self._browse(session, block.node_id, OBJECT_CLASS):
            field_name = SECTION_FIELDS.get(reference.display_name)
            if field_name is None:
                logger.debug(f"ignoring unknown section {reference.display_name} of {block.display_name}")
                continue
            shell = InstanceDbSection(node_id=reference.node_id, display_name=reference.display_name)
            sections[field_name] = await self._discover_section(session, shell, depth)
        return replace(block, **sections)

    async def _discover_section(self, session: Session, section: InstanceDbSection, depth: int) -> InstanceDbSection:
        variables: List[Variable] = []
        nested: List[InstanceDataBlock] = []
        for reference in await self._browse(session, section.node_id, VARIABLE_CLASS | OBJECT_CLASS):
            if reference.node_class == VARIABLE_CLASS:
                variables.append(await self._create_variable(session, reference, depth))
            elif reference.node_class == OBJECT_CLASS:
                shell = InstanceDataBlock(node_id=reference.node_id, display_name=reference.display_name)
                if depth >= self.max_depth:
                    logger.warning(f"Maximum discovery depth {self.max_depth} reached at instance {reference.node_id}")
                    nested.append(shell)
                else:
                    nested.append(await self._discover_instance_db(session, shell, depth + 1))
        return replace(section, variables=tuple(variables), nested_instances=tuple(nested))

    async def _discover_variable(self, session: Session, variable: Variable, depth: int) -> Variable:
        if not variable.s7_type.is_struct:
            return variable
        members = await self._discover_variables(session, variable.node_id, depth + 1)
        if variable.udt_type_name:
            self.registry.enrich_udt_definition(variable.udt_type_name, members)
        return replace(variable, struct_members=tuple(members))

    async def _discover_variables(self, session: Session, parent_id: str, depth: int) -> List[Variable]:
        variables = []
        for reference in await self._browse(session, parent_id, VARIABLE_CLASS):
            variables.append(await self._create_variable(session, reference, depth))
        return variables

    async def _create_variable(self, session: Session, reference: BrowseResult, depth: int) -> Variable:
        if depth > self.max_depth:
            logger.warning(f"Maximum discovery depth {self.max_depth} exceeded at {reference.node_id}")
            return Variable(node_id=reference.node_id, display_name=reference.display_name, s7_type=S7DataType.UNKNOWN)
        s7_type, type_name = await self._read_type(session, reference.node_id)
        variable = Variable(
            node_id=reference.node_id,
            display_name=reference.display_name,
            s7_type=s7_type,
            udt_type_name=type_name,
        )
        if s7_type.is_struct:
            variable = await self._discover_variable(session, variable, depth)
        return variable

    async def _read_type(self, session: Session, node_id: str) -> Tuple[S7DataType, Optional[str]]:
        try:
            data_type, value_rank = await session.read(
                [(node_id, ua.AttributeIds.DataType), (node_id, ua.AttributeIds.ValueRank)]
            )
        except SessionError as e:
            logger.warning(f"Could not read the data type of {node_id}: {e}")
            return S7DataType.UNKNOWN, None
        if not is_good(data_type.status) or data_type.value is None:
            logger.warning(f"No data type for {node_id}, status 0x{data_type.status:08X}")
            return S7DataType.UNKNOWN, None
        rank = value_rank.value if is_good(value_rank.status) else None
        s7_type = map_data_type(data_type.value, rank, self.vendor_namespace_index)
        type_name = None
        if s7_type in (S7DataType.UDT, S7DataType.ARRAY_OF_UDT):
            type_name = udt_type_name(data_type.value)
        if s7_type == S7DataType.UDT and type_name:
            self.registry.register_placeholder(type_name, data_type.value.to_string())
        return s7_type, type_name

    async def _browse(self, session: Session, node_id: str, node_class_mask: int) -> List[BrowseResult]:
        try:
            references = await session.browse(node_id, node_class_mask)
        except SessionError as e:
            logger.error(f"Browse of {node_id} failed: {e}")
            return []
        return [reference for reference in references if reference.display_name != ICON_NODE_NAME]

    # roots

    async def get_all_global_data_blocks(self, session: Session) -> List[GlobalDataBlock]:
        """Shells of all global data blocks."""
        return [
            GlobalDataBlock(node_id=reference.node_id, display_name=reference.display_name)
            for reference in await self._browse_root(session, RootNode.DATA_BLOCKS_GLOBAL)
        ]

    async def get_all_instance_data_blocks(self, session: Session) -> List[InstanceDataBlock]:
        """Shells of all instance data blocks."""
        return [
            InstanceDataBlock(node_id=reference.node_id, display_name=reference.display_name)
            for reference in await self._browse_root(session, RootNode.DATA_BLOCKS_INSTANCE)
        ]

    async def _browse_root(self, session: Session, root: RootNode) -> List[BrowseResult]:
        if not session.connected:
            logger.warning(f"Session is not connected, can't browse {root.value}")
            return []
        return await self._browse(session, root.node_id(self.vendor_namespace_index), OBJECT_CLASS)

    async def get_structure_element(self, session: Session, root: RootNode) -> Optional[StructureElement]:
        """Shell of one of the Inputs, Outputs, Memory, Timers or Counters areas.

        Returns:
            None if the session is disconnected or the area doesn't exist.
        """
        if not session.connected:
            logger.warning(f"Session is not connected, can't get {root.value}")
            return None
        node_id = root.node_id(self.vendor_namespace_index)
        try:
            (result,) = await session.read([(node_id, ua.AttributeIds.DisplayName)])
        except SessionError as e:
            logger.error(f"Reading the display name of {node_id} failed: {e}")
            return None
        if not is_good(result.status):
            logger.warning(f"{root.value} is not available, status 0x{result.status:08X}")
            return None
        name = result.value.Text if isinstance(result.value, ua.LocalizedText) else result.value
        return StructureElement(node_id=node_id, display_name=name or root.value)
