"""
A cache of the discovered PLC structure with variables looked up by full path.
"""

import logging
import threading
from dataclasses import replace
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .path import PathBuilder
from .structure import (
    GlobalDataBlock,
    InstanceDataBlock,
    InstanceDbSection,
    Node,
    StructureElement,
    Variable,
    dispatch_table,
)
from .types import NodeKind, RootNode

logger = logging.getLogger(__name__)

GLOBAL_ROOT = RootNode.DATA_BLOCKS_GLOBAL.value
INSTANCE_ROOT = RootNode.DATA_BLOCKS_INSTANCE.value

PathVariable = Tuple[str, Variable]


def _walk_variable(variable: Variable, path: PathBuilder) -> Iterator[PathVariable]:
    variable_path = path.child(variable.display_name)
    yield variable_path.path, variable
    for member in variable.struct_members:
        yield from _walk_variable(member, variable_path)


def _walk_variables(node, path: PathBuilder) -> Iterator[PathVariable]:
    node_path = path.child(node.display_name)
    for variable in node.variables:
        yield from _walk_variable(variable, node_path)


def _walk_section(section: InstanceDbSection, path: PathBuilder) -> Iterator[PathVariable]:
    section_path = path.child(section.display_name)
    for variable in section.variables:
        yield from _walk_variable(variable, section_path)
    for nested in section.nested_instances:
        yield from _walk_instance(nested, section_path)


def _walk_instance(block: InstanceDataBlock, path: PathBuilder) -> Iterator[PathVariable]:
    block_path = path.child(block.display_name)
    for section in block.sections:
        yield from _walk_section(section, block_path)


_WALKERS = dispatch_table(
    {
        NodeKind.GLOBAL_DATA_BLOCK: _walk_variables,
        NodeKind.STRUCTURE_ELEMENT: _walk_variables,
        NodeKind.INSTANCE_DATA_BLOCK: _walk_instance,
        NodeKind.INSTANCE_DB_SECTION: _walk_section,
        NodeKind.VARIABLE: _walk_variable,
    }
)


def walk(node: Node, root: Optional[str] = None) -> Iterator[PathVariable]:
    """Yield ``(full path, variable)`` for every variable below `node`, struct members included.

    The paths are the same a read with `root` as root context assigns.
    """
    return _WALKERS[node.kind](node, PathBuilder(root))


def _replace_variable(variable: Variable, path: PathBuilder, key: str, new: Variable) -> Variable:
    variable_path = path.child(variable.display_name)
    if variable_path.path.lower() == key:
        return new
    if not variable.struct_members:
        return variable
    members = tuple(_replace_variable(m, variable_path, key, new) for m in variable.struct_members)
    return replace(variable, struct_members=members)


def _replace_in_variables(node, path: PathBuilder, key: str, new: Variable):
    node_path = path.child(node.display_name)
    return replace(node, variables=tuple(_replace_variable(v, node_path, key, new) for v in node.variables))


def _replace_in_section(section: InstanceDbSection, path: PathBuilder, key: str, new: Variable) -> InstanceDbSection:
    section_path = path.child(section.display_name)
    return replace(
        section,
        variables=tuple(_replace_variable(v, section_path, key, new) for v in section.variables),
        nested_instances=tuple(_replace_in_instance(n, section_path, key, new) for n in section.nested_instances),
    )


def _replace_in_instance(block: InstanceDataBlock, path: PathBuilder, key: str, new: Variable) -> InstanceDataBlock:
    block_path = path.child(block.display_name)
    sections = {
        name: _replace_in_section(section, block_path, key, new)
        for name, section in (
            ("inputs", block.inputs),
            ("outputs", block.outputs),
            ("in_outs", block.in_outs),
            ("static", block.static),
        )
        if section is not None
    }
    return replace(block, **sections)


_REPLACERS = dispatch_table(
    {
        NodeKind.GLOBAL_DATA_BLOCK: _replace_in_variables,
        NodeKind.STRUCTURE_ELEMENT: _replace_in_variables,
        NodeKind.INSTANCE_DATA_BLOCK: _replace_in_instance,
        NodeKind.INSTANCE_DB_SECTION: _replace_in_section,
        NodeKind.VARIABLE: _replace_variable,
    }
)


class DataStore:
    """Holds the discovered structure and a case insensitive path index.

    Global data block variables are found under ``DataBlocksGlobal.<db>.<var>``,
    instance data block variables under
    ``DataBlocksInstance.<db>.<section>.<var>`` and area variables under
    ``<area>.<var>``.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.global_data_blocks: Tuple[GlobalDataBlock, ...] = ()
        self.instance_data_blocks: Tuple[InstanceDataBlock, ...] = ()
        self.inputs: Optional[StructureElement] = None
        self.outputs: Optional[StructureElement] = None
        self.memory: Optional[StructureElement] = None
        self.timers: Optional[StructureElement] = None
        self.counters: Optional[StructureElement] = None
        self._cache: Dict[str, Variable] = {}

    def set_structure(
        self,
        global_data_blocks: Sequence[GlobalDataBlock] = (),
        instance_data_blocks: Sequence[InstanceDataBlock] = (),
        inputs: Optional[StructureElement] = None,
        outputs: Optional[StructureElement] = None,
        memory: Optional[StructureElement] = None,
        timers: Optional[StructureElement] = None,
        counters: Optional[StructureElement] = None,
    ) -> None:
        """Replace the whole structure. Call :meth:`build_cache` afterwards."""
        with self._lock:
            self.global_data_blocks = tuple(global_data_blocks)
            self.instance_data_blocks = tuple(instance_data_blocks)
            self.inputs = inputs
            self.outputs = outputs
            self.memory = memory
            self.timers = timers
            self.counters = counters

    def _roots(self) -> List[Tuple[Optional[str], Node]]:
        roots: List[Tuple[Optional[str], Node]] = []
        roots.extend((GLOBAL_ROOT, block) for block in self.global_data_blocks)
        roots.extend((INSTANCE_ROOT, block) for block in self.instance_data_blocks)
        for area in (self.inputs, self.outputs, self.memory, self.timers, self.counters):
            if area is not None:
                roots.append((None, area))
        return roots

    def build_cache(self) -> None:
        with self._lock:
            cache = {}
            for root, node in self._roots():
                for path, variable in walk(node, root):
                    cache[path.lower()] = variable
            self._cache = cache
        logger.debug(f"cached {len(cache)} variables")

    def items(self) -> List[PathVariable]:
        """All ``(path, variable)`` pairs, paths in their original case."""
        with self._lock:
            return [pair for root, node in self._roots() for pair in walk(node, root)]

    def get_variable(self, path: str) -> Optional[Variable]:
        with self._lock:
            return self._cache.get(path.lower())

    def get_all_variables(self) -> List[Variable]:
        with self._lock:
            return list(self._cache.values())

    def find_variables_where(self, predicate: Callable[[Variable], bool]) -> List[Variable]:
        with self._lock:
            return [variable for variable in self._cache.values() if predicate(variable)]

    def update_variable(self, path: str, new: Variable) -> bool:
        """Swap the variable at `path` for `new` in the structure and the cache.

        Returns:
            False if there is no variable at `path`.
        """
        key = path.lower()
        with self._lock:
            if key not in self._cache:
                logger.warning(f"No variable at {path} to update")
                return False
            self.global_data_blocks = tuple(
                _REPLACERS[b.kind](b, PathBuilder(GLOBAL_ROOT), key, new) for b in self.global_data_blocks
            )
            self.instance_data_blocks = tuple(
                _REPLACERS[b.kind](b, PathBuilder(INSTANCE_ROOT), key, new) for b in self.instance_data_blocks
            )
            for name in ("inputs", "outputs", "memory", "timers", "counters"):
                area = getattr(self, name)
                if area is not None:
                    setattr(self, name, _REPLACERS[area.kind](area, PathBuilder(), key, new))
            self.build_cache()
        return True
