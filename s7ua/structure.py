"""
The PLC address space as immutable node values.

Every node type carries a ``kind`` tag. Code that handles several node types
builds a table with one handler per :class:`~s7ua.types.NodeKind` through
:func:`dispatch_table`, which refuses incomplete tables.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, ClassVar, Dict, Iterator, Mapping, Optional, Tuple, TypeVar, Union

from .types import NodeKind, S7DataType, StatusCode


@dataclass(frozen=True)
class Variable:
    """A single PLC variable. STRUCT and UDT variables hold their members."""

    kind: ClassVar[NodeKind] = NodeKind.VARIABLE

    node_id: Optional[str] = None
    display_name: Optional[str] = None
    s7_type: S7DataType = S7DataType.UNKNOWN
    udt_type_name: Optional[str] = None
    struct_members: Tuple["Variable", ...] = ()
    value: Any = None
    raw_value: Any = None
    system_type: Optional[type] = None
    full_path: Optional[str] = None
    status_code: StatusCode = StatusCode.WAITING
    protocol_status: Optional[int] = None
    sampling_interval: int = 0

    def __post_init__(self) -> None:
        if self.struct_members and not self.s7_type.is_struct:
            raise ValueError(f"{self.s7_type.value} variable {self.display_name!r} can't have struct members")
        if not isinstance(self.struct_members, tuple):
            object.__setattr__(self, "struct_members", tuple(self.struct_members))

    def with_type(self, s7_type: S7DataType) -> "Variable":
        """Copy with another S7 type, dropping members a scalar can't have."""
        members = self.struct_members if s7_type.is_struct else ()
        return replace(self, s7_type=s7_type, struct_members=members)

    def find_member(self, name: str) -> Optional["Variable"]:
        for member in self.struct_members:
            if member.display_name == name:
                return member
        return None


@dataclass(frozen=True)
class GlobalDataBlock:
    kind: ClassVar[NodeKind] = NodeKind.GLOBAL_DATA_BLOCK

    node_id: Optional[str] = None
    display_name: Optional[str] = None
    variables: Tuple[Variable, ...] = ()
    full_path: Optional[str] = None


@dataclass(frozen=True)
class InstanceDbSection:
    kind: ClassVar[NodeKind] = NodeKind.INSTANCE_DB_SECTION

    node_id: Optional[str] = None
    display_name: Optional[str] = None
    variables: Tuple[Variable, ...] = ()
    nested_instances: Tuple["InstanceDataBlock", ...] = ()
    full_path: Optional[str] = None


@dataclass(frozen=True)
class InstanceDataBlock:
    """A function block instance DB with its four sections."""

    kind: ClassVar[NodeKind] = NodeKind.INSTANCE_DATA_BLOCK

    node_id: Optional[str] = None
    display_name: Optional[str] = None
    inputs: Optional[InstanceDbSection] = None
    outputs: Optional[InstanceDbSection] = None
    in_outs: Optional[InstanceDbSection] = None
    static: Optional[InstanceDbSection] = None
    full_path: Optional[str] = None

    @property
    def sections(self) -> Tuple[InstanceDbSection, ...]:
        """The sections that are present, in declaration order."""
        return tuple(s for s in (self.inputs, self.outputs, self.in_outs, self.static) if s is not None)


@dataclass(frozen=True)
class StructureElement:
    """An area root: Inputs, Outputs, Memory, Timers or Counters."""

    kind: ClassVar[NodeKind] = NodeKind.STRUCTURE_ELEMENT

    node_id: Optional[str] = None
    display_name: Optional[str] = None
    variables: Tuple[Variable, ...] = ()
    full_path: Optional[str] = None


Node = Union[GlobalDataBlock, InstanceDataBlock, InstanceDbSection, StructureElement, Variable]

T = TypeVar("T")
Handler = Callable[..., T]


def dispatch_table(handlers: Mapping[NodeKind, Handler]) -> Dict[NodeKind, Handler]:
    """Check that a handler table covers every node kind.

    Args:
        handlers: one callable per :class:`NodeKind`.

    Returns:
        The handlers as a plain dict.

    Raises:
        ValueError: if a kind is missing.

    Examples:
        >>> names = dispatch_table({kind: lambda node: node.display_name for kind in NodeKind})
        >>> names[Variable.kind](Variable(display_name="Speed"))
        'Speed'
    """
    missing = set(NodeKind) - set(handlers)
    if missing:
        raise ValueError(f"no handler for node kinds: {', '.join(sorted(k.value for k in missing))}")
    return dict(handlers)


def iter_leaves(variable: Variable) -> Iterator[Variable]:
    """Yield the non-struct variables of a variable tree, depth first."""
    if variable.s7_type.is_struct:
        for member in variable.struct_members:
            yield from iter_leaves(member)
    else:
        yield variable


def node_variables(node: Node) -> Iterator[Variable]:
    """Yield the top level variables of a node and all of its children."""
    yield from _NODE_VARIABLES[node.kind](node)


def _section_variables(section: InstanceDbSection) -> Iterator[Variable]:
    yield from section.variables
    for nested in section.nested_instances:
        yield from node_variables(nested)


def _instance_variables(block: InstanceDataBlock) -> Iterator[Variable]:
    for section in block.sections:
        yield from _section_variables(section)


def _variable_itself(variable: Variable) -> Iterator[Variable]:
    yield variable


_NODE_VARIABLES = dispatch_table(
    {
        NodeKind.GLOBAL_DATA_BLOCK: lambda node: iter(node.variables),
        NodeKind.STRUCTURE_ELEMENT: lambda node: iter(node.variables),
        NodeKind.INSTANCE_DB_SECTION: _section_variables,
        NodeKind.INSTANCE_DATA_BLOCK: _instance_variables,
        NodeKind.VARIABLE: _variable_itself,
    }
)

__all__ = [
    "Variable",
    "GlobalDataBlock",
    "InstanceDataBlock",
    "InstanceDbSection",
    "StructureElement",
    "Node",
    "dispatch_table",
    "iter_leaves",
    "node_variables",
]
