"""
Reading and writing the values of discovered nodes.

A read collects the node ids of all leaf variables below a node, reads them
in one request and returns a new tree carrying the converted values and the
full path of every variable. Writes convert a python value back to its wire
representation, struct values are written member by member.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from asyncua import ua
from asyncua.ua.uaerrors import UaStringParsingError

from .converters import STRUCT_MEMBERS, get_converter
from .error import ConversionError, NotFoundError, SessionError
from .path import PathBuilder
from .structure import (
    GlobalDataBlock,
    InstanceDataBlock,
    InstanceDbSection,
    Node,
    StructureElement,
    Variable,
    dispatch_table,
    iter_leaves,
    node_variables,
)
from .types import NodeKind, S7DataType, StatusCode
from .ua.session import ReadResult, Session
from .ua.status import (
    BAD_INTERNAL_ERROR,
    BAD_NODE_ID_INVALID,
    BAD_WAITING_FOR_INITIAL_DATA,
    GOOD,
    is_good,
    to_status_code,
)
from .ua.type_map import wire_type
from .udt.registry import UdtTypeRegistry

logger = logging.getLogger(__name__)

Results = Dict[Optional[str], ReadResult]

INVALID_NODE_ID = ReadResult(value=None, status=BAD_NODE_ID_INVALID)

# a struct takes the status of its worst member
STATUS_SEVERITY = {
    StatusCode.GOOD: 0,
    StatusCode.UNCERTAIN: 1,
    StatusCode.WAITING: 2,
    StatusCode.BAD: 3,
}


def is_valid_node_id(node_id: Optional[str]) -> bool:
    if not node_id:
        return False
    try:
        ua.NodeId.from_string(node_id)
    except (UaStringParsingError, ValueError):
        return False
    return True


def to_variant(raw: Any, s7_type: Optional[S7DataType] = None) -> ua.Variant:
    """Wrap a converted value in a variant of the S7 type's wire type."""
    if isinstance(raw, ua.Variant):
        return raw
    variant_type = wire_type(s7_type) if s7_type is not None else None
    if variant_type == ua.VariantType.Byte and isinstance(raw, (bytes, bytearray)):
        # Byte[] arrays travel as lists, bytes would become a ByteString
        raw = list(raw)
    if variant_type is None:
        return ua.Variant(raw)
    return ua.Variant(raw, variant_type)


class NodeValueAccess:
    """Batched reads and converted writes of node values."""

    def __init__(self, registry: UdtTypeRegistry):
        self.registry = registry
        self._rebuilders = dispatch_table(
            {
                NodeKind.GLOBAL_DATA_BLOCK: self._rebuild_global_db,
                NodeKind.STRUCTURE_ELEMENT: self._rebuild_structure_element,
                NodeKind.INSTANCE_DATA_BLOCK: self._rebuild_instance_db,
                NodeKind.INSTANCE_DB_SECTION: self._rebuild_section,
                NodeKind.VARIABLE: self._process_variable,
            }
        )

    # reading

    async def read_node_values(self, session: Session, node: Node, root_context: Optional[str] = None) -> Node:
        """Read all values below `node` in one request.

        Args:
            session: a connected session.
            node: a discovered node.
            root_context: prefix of all full paths, e.g. ``"DataBlocksGlobal"``.

        Returns:
            A copy of `node` with values, status codes and full paths. A leaf
            that couldn't be read carries a Bad or Waiting status, the other
            leaves are not affected.
        """
        if not session.connected:
            logger.warning(f"Session is not connected, can't read {node.display_name}")
            return node

        node_ids: List[str] = []
        seen = set()
        results: Results = {}
        for variable in node_variables(node):
            for leaf in iter_leaves(variable):
                if not is_valid_node_id(leaf.node_id):
                    results[leaf.node_id] = INVALID_NODE_ID
                elif leaf.node_id not in seen:
                    seen.add(leaf.node_id)
                    node_ids.append(leaf.node_id)

        if node_ids:
            logger.debug(f"reading {len(node_ids)} values below {node.display_name}")
            try:
                read_results = await session.read([(node_id, ua.AttributeIds.Value) for node_id in node_ids])
            except SessionError as e:
                logger.error(f"Reading values below {node.display_name} failed: {e}")
                read_results = []
            results.update(zip(node_ids, read_results))

        return self._rebuilders[node.kind](node, PathBuilder(root_context), results)

    def _rebuild_global_db(self, block: GlobalDataBlock, path: PathBuilder, results: Results) -> GlobalDataBlock:
        block_path = path.child(block.display_name)
        variables = tuple(self._process_variable(v, block_path, results) for v in block.variables)
        return replace(block, variables=variables, full_path=block_path.path)

    def _rebuild_structure_element(
        self, element: StructureElement, path: PathBuilder, results: Results
    ) -> StructureElement:
        element_path = path.child(element.display_name)
        variables = tuple(self._process_variable(v, element_path, results) for v in element.variables)
        return replace(element, variables=variables, full_path=element_path.path)

    def _rebuild_instance_db(self, block: InstanceDataBlock, path: PathBuilder, results: Results) -> InstanceDataBlock:
        block_path = path.child(block.display_name)
        sections = {
            name: self._rebuild_section(section, block_path, results)
            for name, section in (
                ("inputs", block.inputs),
                ("outputs", block.outputs),
                ("in_outs", block.in_outs),
                ("static", block.static),
            )
            if section is not None
        }
        return replace(block, full_path=block_path.path, **sections)

    def _rebuild_section(self, section: InstanceDbSection, path: PathBuilder, results: Results) -> InstanceDbSection:
        section_path = path.child(section.display_name)
        variables = tuple(self._process_variable(v, section_path, results) for v in section.variables)
        nested = tuple(self._rebuild_instance_db(n, section_path, results) for n in section.nested_instances)
        return replace(section, variables=variables, nested_instances=nested, full_path=section_path.path)

    def _process_variable(self, variable: Variable, path: PathBuilder, results: Results) -> Variable:
        full_path = path.child(variable.display_name)
        if not variable.s7_type.is_struct:
            return self._process_leaf(variable, full_path.path, results)

        members = tuple(self._process_variable(m, full_path, results) for m in variable.struct_members)
        worst = max(members, key=lambda m: STATUS_SEVERITY[m.status_code], default=None)
        struct = replace(
            variable,
            struct_members=members,
            full_path=full_path.path,
            status_code=worst.status_code if worst is not None else StatusCode.GOOD,
            protocol_status=worst.protocol_status if worst is not None else GOOD,
        )
        converter = self.registry.get_custom_converter(variable.udt_type_name)
        if converter is None:
            return struct
        try:
            value = converter.from_members(members)
        except Exception as e:
            logger.error(f"Custom converter for {variable.udt_type_name} failed on {full_path}: {e}")
            return struct
        return replace(struct, value=value, system_type=converter.target_type)

    def _process_leaf(self, variable: Variable, full_path: str, results: Results) -> Variable:
        result = results.get(variable.node_id)
        if result is None:
            return replace(
                variable,
                full_path=full_path,
                status_code=StatusCode.WAITING,
                protocol_status=BAD_WAITING_FOR_INITIAL_DATA,
            )
        if not is_good(result.status):
            return replace(
                variable,
                full_path=full_path,
                status_code=to_status_code(result.status),
                protocol_status=result.status,
            )

        fallback = type(result.value) if result.value is not None else object
        converter = get_converter(variable.s7_type, fallback)
        try:
            value = converter.from_protocol(result.value)
        except ConversionError as e:
            logger.error(f"Could not convert {full_path} as {variable.s7_type.value}: {e}")
            return replace(
                variable,
                raw_value=result.value,
                full_path=full_path,
                status_code=StatusCode.BAD,
                protocol_status=BAD_INTERNAL_ERROR,
            )
        return replace(
            variable,
            value=value,
            raw_value=result.value,
            system_type=converter.target_type,
            full_path=full_path,
            status_code=StatusCode.GOOD,
            protocol_status=result.status,
        )

    # writing

    async def write_variable(self, session: Session, node_id: str, value: Any, s7_type: S7DataType) -> bool:
        """Convert `value` to the wire representation of `s7_type` and write it.

        Returns:
            True if the server accepted the value.

        Raises:
            ConversionError: if `value` doesn't fit `s7_type`.
        """
        converter = get_converter(s7_type, type(value))
        raw = converter.to_protocol(value)
        if raw is None:
            raise ConversionError(f"Converting {value!r} to {s7_type.value} gave no value to write")
        return await self.write_raw(session, node_id, raw, s7_type)

    async def write_raw(self, session: Session, node_id: str, raw: Any, s7_type: Optional[S7DataType] = None) -> bool:
        """Write an already converted value."""
        if not session.connected:
            logger.warning(f"Session is not connected, can't write {node_id}")
            return False
        try:
            (status,) = await session.write([(node_id, to_variant(raw, s7_type))])
        except SessionError as e:
            logger.error(f"Writing {node_id} failed: {e}")
            return False
        if is_good(status):
            logger.debug(f"wrote {node_id}")
            return True
        logger.error(f"Writing {node_id} failed with status 0x{status:08X}")
        return False

    async def write_node(self, session: Session, variable: Variable, value: Any) -> bool:
        """Write `value` to a discovered variable.

        Struct and UDT variables take an instance of the registered custom
        converter's type, or a mapping of member names to values. Their
        members are written one by one; the result is False if any write
        failed, the others are not rolled back.

        Raises:
            NotFoundError: if the variable has no node id.
            ConversionError: if `value` doesn't fit the variable.
        """
        if not variable.node_id:
            raise NotFoundError(f"Variable '{variable.display_name}' has no node id and can't be written")
        if not variable.s7_type.is_struct:
            return await self.write_variable(session, variable.node_id, value, variable.s7_type)

        converter = self.registry.get_custom_converter(variable.udt_type_name)
        if converter is not None and isinstance(value, converter.target_type):
            members = converter.to_members(value, variable.struct_members)
        else:
            members = STRUCT_MEMBERS.to_members(value, variable.struct_members)
        return await self._write_members(session, members)

    async def _write_members(self, session: Session, members: Sequence[Variable]) -> bool:
        success = True
        for member in members:
            if member.s7_type.is_struct:
                written = await self._write_members(session, member.struct_members)
            elif member.node_id and member.value is not None:
                written = await self.write_variable(session, member.node_id, member.value, member.s7_type)
            else:
                continue
            success = written and success
        return success
