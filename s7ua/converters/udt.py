"""
Converters for STRUCT and UDT variables.

Struct values never travel as one piece, every member is a variable of its
own. A UDT converter therefore works on the list of member variables:
:class:`StructMembersConverter` turns them into ``(name, value)`` pairs and
back, a :class:`CustomUdtConverter` registered for a UDT type name turns them
into an instance of a user class and takes precedence.
"""

from dataclasses import replace
from typing import Any, Callable, Generic, Iterator, List, Mapping, Optional, Protocol, Sequence, Tuple, Type, TypeVar, Union

from ..error import ConversionError
from ..structure import Variable

T = TypeVar("T")
MemberPairs = List[Tuple[str, Any]]
MemberUpdates = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]


class UdtConverter(Protocol):
    """Projects the member variables of a struct to one python value and back."""

    target_type: type

    def from_members(self, members: Sequence[Variable]) -> Any: ...

    def to_members(self, value: Any, template: Sequence[Variable]) -> List[Variable]:
        """Members of `template` that carry the values of `value`."""
        ...


class MemberValues(Mapping[str, Any]):
    """Read only view of converted member values by display name.

    Nested structs without a value of their own are returned as another
    MemberValues.

    Examples:
        >>> values = MemberValues([Variable(display_name="Speed", value=12)])
        >>> values["Speed"]
        12
    """

    def __init__(self, members: Sequence[Variable]):
        self._members = {member.display_name: member for member in members if member.display_name is not None}

    def __getitem__(self, name: str) -> Any:
        member = self._members[name]
        if member.s7_type.is_struct and member.value is None:
            return MemberValues(member.struct_members)
        return member.value

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def member(self, name: str) -> Optional[Variable]:
        """The member variable itself, None if there is none by that name."""
        return self._members.get(name)


class StructMembersConverter:
    """Generic struct handling as an ordered list of ``(name, value)`` pairs."""

    target_type = list

    def from_members(self, members: Sequence[Variable]) -> MemberPairs:
        pairs = []
        for member in members:
            if member.s7_type.is_struct and member.value is None:
                pairs.append((member.display_name, self.from_members(member.struct_members)))
            else:
                pairs.append((member.display_name, member.value))
        return pairs

    def to_members(self, value: Any, template: Sequence[Variable]) -> List[Variable]:
        """Members of `template` named in `value`, carrying the new values.

        Args:
            value: a mapping or a sequence of ``(name, value)`` pairs. Nested
                structs take a mapping or pairs again.
            template: the discovered members of the struct.

        Raises:
            ConversionError: if `value` names a member the template lacks.
        """
        updates = _as_updates(value)
        known = {member.display_name for member in template}
        unknown = [name for name in updates if name not in known]
        if unknown:
            raise ConversionError(f"unknown struct members: {', '.join(unknown)}")
        members = []
        for member in template:
            if member.display_name not in updates:
                continue
            new_value = updates[member.display_name]
            if member.s7_type.is_struct:
                nested = self.to_members(new_value, member.struct_members)
                members.append(replace(member, struct_members=tuple(nested), value=None))
            else:
                members.append(replace(member, value=new_value))
        return members


def _as_updates(value: Any) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    if isinstance(value, (list, tuple)) and all(isinstance(pair, tuple) and len(pair) == 2 for pair in value):
        return dict(value)
    raise ConversionError(f"struct values must be a mapping or (name, value) pairs, got {type(value).__name__}")


STRUCT_MEMBERS = StructMembersConverter()


class CustomUdtConverter(Generic[T]):
    """Maps the members of one UDT type to instances of a user class.

    Args:
        udt_type_name: the UDT name as discovered, e.g. ``"DT_Motor"``.
        target_type: the user class.
        decode: builds an instance from the member values.
        encode: returns the member values of an instance by member name.

    Examples:
        >>> motor = CustomUdtConverter(
        ...     "DT_Motor",
        ...     Motor,
        ...     decode=lambda m: Motor(speed=m["Speed"], running=m["Running"]),
        ...     encode=lambda motor: {"Speed": motor.speed, "Running": motor.running},
        ... )
    """

    def __init__(
        self,
        udt_type_name: str,
        target_type: Type[T],
        decode: Callable[[MemberValues], T],
        encode: Callable[[T], Mapping[str, Any]],
    ):
        if not udt_type_name:
            raise ValueError("udt_type_name is required")
        self.udt_type_name = udt_type_name
        self.target_type = target_type
        self._decode = decode
        self._encode = encode

    def from_members(self, members: Sequence[Variable]) -> T:
        return self._decode(MemberValues(members))

    def to_members(self, value: T, template: Sequence[Variable]) -> List[Variable]:
        if not isinstance(value, self.target_type):
            raise ConversionError(
                f"{self.udt_type_name} expects {self.target_type.__name__}, got {type(value).__name__}"
            )
        return STRUCT_MEMBERS.to_members(self._encode(value), template)

    def __repr__(self) -> str:
        return f"<CustomUdtConverter {self.udt_type_name} -> {self.target_type.__name__}>"
