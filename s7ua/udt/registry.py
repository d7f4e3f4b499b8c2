import logging
import threading
from dataclasses import replace
from typing import Dict, Optional, Sequence

from ..error import NotFoundError
from ..structure import Variable
from ..ua.type_map import TYPE_SIZES
from .definition import UdtDefinition, UdtMemberDefinition

logger = logging.getLogger(__name__)


class UdtTypeRegistry:
    """UDT definitions and custom UDT converters by UDT type name.

    Every method is safe to call from concurrent tasks and threads.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._definitions: Dict[str, UdtDefinition] = {}
        self._converters: Dict[str, object] = {}

    # definitions

    def register_udt_definition(self, definition: UdtDefinition) -> None:
        """Add or replace a definition."""
        if not definition.name:
            raise ValueError("UDT definition needs a name")
        with self._lock:
            self._definitions[definition.name] = definition
        logger.debug(f"registered UDT definition {definition.name} with {len(definition.members)} members")

    def register_placeholder(self, name: str, data_type_node_id: Optional[str] = None) -> UdtDefinition:
        """Register an empty definition unless one exists, returns the registered one."""
        if not name:
            raise ValueError("UDT definition needs a name")
        with self._lock:
            existing = self._definitions.get(name)
            if existing is not None:
                return existing
            definition = UdtDefinition(name=name, data_type_node_id=data_type_node_id)
            self._definitions[name] = definition
        logger.debug(f"registered placeholder for UDT {name}")
        return definition

    def enrich_udt_definition(self, name: str, members: Sequence[Variable]) -> Optional[UdtDefinition]:
        """Fill in the members of a placeholder from discovered member variables.

        Definitions that already have members are kept as they are. Offsets
        are accumulated from the fixed sizes of the member types, members of
        unknown size count as zero bytes.

        Returns:
            The registered definition, None if there is none by that name.
        """
        with self._lock:
            definition = self._definitions.get(name)
            if definition is None or not definition.is_placeholder or not members:
                return definition
            member_definitions = []
            offset = 0
            for member in members:
                size = self._member_size(member)
                member_definitions.append(
                    UdtMemberDefinition(
                        name=member.display_name or "",
                        s7_type=member.s7_type,
                        udt_type_name=member.udt_type_name,
                        offset=offset,
                        size_in_bytes=size,
                    )
                )
                offset += size
            definition = replace(definition, members=tuple(member_definitions), size_in_bytes=offset)
            self._definitions[name] = definition
        return definition

    def _member_size(self, member: Variable) -> int:
        if member.s7_type.is_struct:
            nested = self._definitions.get(member.udt_type_name) if member.udt_type_name else None
            if nested is not None and nested.size_in_bytes:
                return nested.size_in_bytes
            return sum(self._member_size(m) for m in member.struct_members)
        return TYPE_SIZES.get(member.s7_type, 0)

    def get_udt_definition(self, name: str) -> Optional[UdtDefinition]:
        with self._lock:
            return self._definitions.get(name)

    def require_udt_definition(self, name: str) -> UdtDefinition:
        """Like :meth:`get_udt_definition` but raises NotFoundError."""
        definition = self.get_udt_definition(name)
        if definition is None:
            raise NotFoundError(f"No definition for UDT '{name}'")
        return definition

    def get_all_udt_definitions(self) -> Dict[str, UdtDefinition]:
        with self._lock:
            return dict(self._definitions)

    def remove_udt_definition(self, name: str) -> bool:
        with self._lock:
            return self._definitions.pop(name, None) is not None

    def has_udt_definition(self, name: str) -> bool:
        with self._lock:
            return name in self._definitions

    # custom converters

    def register_custom_converter(self, converter, udt_type_name: Optional[str] = None) -> None:
        """Register a custom UDT converter, under its own udt_type_name by default."""
        name = udt_type_name or getattr(converter, "udt_type_name", None)
        if not name:
            raise ValueError("custom converter needs a UDT type name")
        with self._lock:
            self._converters[name] = converter
        logger.debug(f"registered custom converter for UDT {name}")

    def get_custom_converter(self, name: Optional[str]):
        if not name:
            return None
        with self._lock:
            return self._converters.get(name)

    def get_all_custom_converters(self) -> Dict[str, object]:
        with self._lock:
            return dict(self._converters)

    def remove_custom_converter(self, name: str) -> bool:
        with self._lock:
            return self._converters.pop(name, None) is not None

    def has_custom_converter(self, name: str) -> bool:
        with self._lock:
            return name in self._converters

    def get_udt_type(self, name: str) -> Optional[type]:
        """The python type a custom converter produces for a UDT."""
        converter = self.get_custom_converter(name)
        return converter.target_type if converter is not None else None

    def clear_udt_definitions(self) -> None:
        with self._lock:
            self._definitions.clear()

    def clear_custom_converters(self) -> None:
        with self._lock:
            self._converters.clear()

    def clear(self) -> None:
        with self._lock:
            self._definitions.clear()
            self._converters.clear()
