from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple

from ..types import S7DataType


@dataclass(frozen=True)
class UdtMemberDefinition:
    name: str
    s7_type: S7DataType
    udt_type_name: Optional[str] = None
    offset: int = 0
    array_length: int = 1
    description: str = ""
    size_in_bytes: int = 0

    @property
    def is_array(self) -> bool:
        return self.array_length > 1 or self.s7_type.is_array

    @property
    def is_nested_udt(self) -> bool:
        return self.s7_type == S7DataType.UDT and self.udt_type_name is not None


@dataclass(frozen=True)
class UdtDefinition:
    """Layout of a user defined type as far as discovery could tell.

    A definition without members is a placeholder, registered the first time
    a variable of that type was seen.
    """

    name: str
    members: Tuple[UdtMemberDefinition, ...] = ()
    description: str = ""
    size_in_bytes: int = 0
    discovered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    data_type_node_id: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return not self.members
