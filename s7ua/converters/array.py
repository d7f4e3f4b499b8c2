from typing import Any, List, Optional

from asyncua import ua

from .base import TypeConverter, expect_type


class ElementwiseArrayConverter:
    """Applies a scalar converter to every element of an array.

    `wire_type` is the variant type of a single raw element, which is not
    derivable from the python element type (an INT and a DINT are both int).
    Byte strings produced by the element converter are unpacked into lists,
    so an array of DATE_AND_TIME is written as a matrix of bytes.
    """

    target_type = list

    def __init__(self, element: TypeConverter, wire_type: Optional[ua.VariantType]):
        self.element = element
        self.wire_type = wire_type

    @property
    def element_type(self) -> type:
        return self.element.target_type

    def from_protocol(self, raw: Any) -> List[Any]:
        if raw is None:
            return []
        expect_type(raw, (list, tuple, bytes, bytearray), "array")
        return [self.element.from_protocol(item) for item in raw]

    def to_protocol(self, value: Any) -> Optional[ua.Variant]:
        if value is None:
            return None
        expect_type(value, (list, tuple), "array")
        items = []
        for element in value:
            item = self.element.to_protocol(element)
            if isinstance(item, (bytes, bytearray)):
                item = list(item)
            items.append(item)
        if self.wire_type is None:
            return ua.Variant(items)
        return ua.Variant(items, self.wire_type)

    def __repr__(self) -> str:
        return f"<ElementwiseArrayConverter of {self.element!r}>"
