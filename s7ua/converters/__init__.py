"""
Conversion between the raw values of the OPC UA server and python values.

Use :func:`get_converter` to find the converter of an S7 type. Types without
a dedicated converter get a :class:`DefaultConverter` that passes values
through.
"""

from datetime import datetime
from typing import Dict

from ..types import S7DataType
from ..ua.type_map import wire_type
from .array import ElementwiseArrayConverter
from .base import DefaultConverter, TypeConverter
from .bcd import CounterConverter, DateAndTimeConverter, S5TimeConverter
from .chars import CHAR, WCHAR, CharConverter
from .dtl import DtlConverter
from .durations import LTIME, LTIME_OF_DAY, TIME, TIME_OF_DAY, DateConverter, DurationConverter
from .udt import STRUCT_MEMBERS, CustomUdtConverter, MemberValues, StructMembersConverter, UdtConverter

T = S7DataType

# python types of the values the server delivers as they are
PLAIN_TYPES: Dict[S7DataType, type] = {
    T.BOOL: bool,
    T.BYTE: int,
    T.WORD: int,
    T.DWORD: int,
    T.LWORD: int,
    T.SINT: int,
    T.USINT: int,
    T.INT: int,
    T.UINT: int,
    T.DINT: int,
    T.UDINT: int,
    T.LINT: int,
    T.ULINT: int,
    T.REAL: float,
    T.LREAL: float,
    T.STRING: str,
    T.WSTRING: str,
    T.LDT: datetime,
}

SCALAR_CONVERTERS: Dict[S7DataType, TypeConverter] = {
    T.CHAR: CHAR,
    T.WCHAR: WCHAR,
    T.DATE_AND_TIME: DateAndTimeConverter(),
    T.S5TIME: S5TimeConverter(),
    T.COUNTER: CounterConverter(),
    T.DATE: DateConverter(),
    T.TIME: TIME,
    T.LTIME: LTIME,
    T.TIME_OF_DAY: TIME_OF_DAY,
    T.LTIME_OF_DAY: LTIME_OF_DAY,
    T.DTL: DtlConverter(),
}


def _build_converters() -> Dict[S7DataType, TypeConverter]:
    converters = dict(SCALAR_CONVERTERS)
    for s7_type in S7DataType:
        if not s7_type.is_array or s7_type.element_type.is_struct:
            continue
        element = s7_type.element_type
        element_converter = SCALAR_CONVERTERS.get(element) or DefaultConverter(PLAIN_TYPES.get(element, object))
        converters[s7_type] = ElementwiseArrayConverter(element_converter, wire_type(element))
    return converters


CONVERTERS = _build_converters()


def get_converter(s7_type: S7DataType, fallback_type: type = object) -> TypeConverter:
    """Find the converter for an S7 type.

    Args:
        s7_type: the type of the variable.
        fallback_type: reported as ``target_type`` when no dedicated
            converter exists.

    Examples:
        >>> get_converter(S7DataType.S5TIME).from_protocol(0x2127)
        datetime.timedelta(seconds=127)
        >>> get_converter(S7DataType.INT, int).target_type
        <class 'int'>
    """
    converter = CONVERTERS.get(s7_type)
    if converter is not None:
        return converter
    return DefaultConverter(PLAIN_TYPES.get(s7_type, fallback_type) if fallback_type is object else fallback_type)


__all__ = [
    "TypeConverter",
    "DefaultConverter",
    "ElementwiseArrayConverter",
    "CharConverter",
    "CounterConverter",
    "DateAndTimeConverter",
    "DateConverter",
    "DurationConverter",
    "DtlConverter",
    "S5TimeConverter",
    "UdtConverter",
    "StructMembersConverter",
    "CustomUdtConverter",
    "MemberValues",
    "STRUCT_MEMBERS",
    "CONVERTERS",
    "get_converter",
]
