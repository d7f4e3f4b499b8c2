"""
Lookup tables from OPC UA data type ids to S7 data types.

The S7 server exposes standard types in namespace 0 and its own types in the
vendor namespace, either with a numeric id or, for DTL and UDTs, a string id.
The value rank tells scalars (-1) from arrays (1). DATE_AND_TIME is itself a
byte array, so its scalar form has rank 1 and its array form rank 2.

New firmware types only need a new table row.
"""

from typing import Any, Dict, Optional, Tuple

from asyncua import ua

from ..types import S7DataType

SCALAR = -1
ONE_DIMENSION = 1
TWO_DIMENSIONS = 2

BASE_NAMESPACE = 0
DTL_DATA_TYPE_ID = "DT_DTL"
DTL_ENCODING_ID = "TE_DTL"

T = S7DataType

# (numeric id, value rank) -> S7 type, namespace 0
BASE_TYPES: Dict[Tuple[int, int], S7DataType] = {
    (1, SCALAR): T.BOOL,
    (2, SCALAR): T.SINT,
    (3, SCALAR): T.USINT,
    (4, SCALAR): T.INT,
    (5, SCALAR): T.UINT,
    (6, SCALAR): T.DINT,
    (7, SCALAR): T.UDINT,
    (8, SCALAR): T.LINT,
    (9, SCALAR): T.ULINT,
    (10, SCALAR): T.REAL,
    (11, SCALAR): T.LREAL,
    (12, SCALAR): T.WSTRING,
    (13, SCALAR): T.LDT,
    (1, ONE_DIMENSION): T.ARRAY_OF_BOOL,
    (2, ONE_DIMENSION): T.ARRAY_OF_SINT,
    (3, ONE_DIMENSION): T.ARRAY_OF_USINT,
    (4, ONE_DIMENSION): T.ARRAY_OF_INT,
    (5, ONE_DIMENSION): T.ARRAY_OF_UINT,
    (6, ONE_DIMENSION): T.ARRAY_OF_DINT,
    (7, ONE_DIMENSION): T.ARRAY_OF_UDINT,
    (8, ONE_DIMENSION): T.ARRAY_OF_LINT,
    (9, ONE_DIMENSION): T.ARRAY_OF_ULINT,
    (10, ONE_DIMENSION): T.ARRAY_OF_REAL,
    (11, ONE_DIMENSION): T.ARRAY_OF_LREAL,
    (12, ONE_DIMENSION): T.ARRAY_OF_WSTRING,
    (13, ONE_DIMENSION): T.ARRAY_OF_LDT,
}

# (numeric id, value rank) -> S7 type, vendor namespace
VENDOR_NUMERIC_TYPES: Dict[Tuple[int, int], S7DataType] = {
    (3001, SCALAR): T.BYTE,
    (3002, SCALAR): T.WORD,
    (3003, SCALAR): T.DWORD,
    (3004, SCALAR): T.LWORD,
    (3005, SCALAR): T.S5TIME,
    (3006, SCALAR): T.TIME,
    (3007, SCALAR): T.LTIME,
    (3008, SCALAR): T.DATE,
    (3009, SCALAR): T.TIME_OF_DAY,
    (3010, SCALAR): T.LTIME_OF_DAY,
    (3012, SCALAR): T.CHAR,
    (3013, SCALAR): T.WCHAR,
    (3014, SCALAR): T.STRING,
    (3001, ONE_DIMENSION): T.ARRAY_OF_BYTE,
    (3002, ONE_DIMENSION): T.ARRAY_OF_WORD,
    (3003, ONE_DIMENSION): T.ARRAY_OF_DWORD,
    (3004, ONE_DIMENSION): T.ARRAY_OF_LWORD,
    (3005, ONE_DIMENSION): T.ARRAY_OF_S5TIME,
    (3006, ONE_DIMENSION): T.ARRAY_OF_TIME,
    (3007, ONE_DIMENSION): T.ARRAY_OF_LTIME,
    (3008, ONE_DIMENSION): T.ARRAY_OF_DATE,
    (3009, ONE_DIMENSION): T.ARRAY_OF_TIME_OF_DAY,
    (3010, ONE_DIMENSION): T.ARRAY_OF_LTIME_OF_DAY,
    (3011, ONE_DIMENSION): T.DATE_AND_TIME,
    (3012, ONE_DIMENSION): T.ARRAY_OF_CHAR,
    (3013, ONE_DIMENSION): T.ARRAY_OF_WCHAR,
    (3014, ONE_DIMENSION): T.ARRAY_OF_STRING,
    (3011, TWO_DIMENSIONS): T.ARRAY_OF_DATE_AND_TIME,
}

# (string id, value rank) -> S7 type, vendor namespace
VENDOR_STRING_TYPES: Dict[Tuple[str, int], S7DataType] = {
    (DTL_DATA_TYPE_ID, SCALAR): T.DTL,
    (DTL_DATA_TYPE_ID, ONE_DIMENSION): T.ARRAY_OF_DTL,
}

# value rank -> S7 type for every other string id in the vendor namespace
VENDOR_STRING_DEFAULTS: Dict[int, S7DataType] = {
    SCALAR: T.UDT,
    ONE_DIMENSION: T.ARRAY_OF_UDT,
}

# variant type used to write each S7 type, arrays use their element's
WIRE_TYPES: Dict[S7DataType, ua.VariantType] = {
    T.BOOL: ua.VariantType.Boolean,
    T.BYTE: ua.VariantType.Byte,
    T.WORD: ua.VariantType.UInt16,
    T.DWORD: ua.VariantType.UInt32,
    T.LWORD: ua.VariantType.UInt64,
    T.SINT: ua.VariantType.SByte,
    T.USINT: ua.VariantType.Byte,
    T.INT: ua.VariantType.Int16,
    T.UINT: ua.VariantType.UInt16,
    T.DINT: ua.VariantType.Int32,
    T.UDINT: ua.VariantType.UInt32,
    T.LINT: ua.VariantType.Int64,
    T.ULINT: ua.VariantType.UInt64,
    T.REAL: ua.VariantType.Float,
    T.LREAL: ua.VariantType.Double,
    T.CHAR: ua.VariantType.Byte,
    T.WCHAR: ua.VariantType.UInt16,
    T.STRING: ua.VariantType.String,
    T.WSTRING: ua.VariantType.String,
    T.DATE: ua.VariantType.UInt16,
    T.TIME: ua.VariantType.Int32,
    T.LTIME: ua.VariantType.Int64,
    T.TIME_OF_DAY: ua.VariantType.UInt32,
    T.LTIME_OF_DAY: ua.VariantType.UInt64,
    T.S5TIME: ua.VariantType.UInt16,
    T.DATE_AND_TIME: ua.VariantType.Byte,
    T.LDT: ua.VariantType.DateTime,
    T.DTL: ua.VariantType.ExtensionObject,
    T.COUNTER: ua.VariantType.UInt16,
}

# sizes in the PLC memory, in bytes
TYPE_SIZES: Dict[S7DataType, int] = {
    T.BOOL: 1,
    T.BYTE: 1,
    T.USINT: 1,
    T.SINT: 1,
    T.CHAR: 1,
    T.WORD: 2,
    T.INT: 2,
    T.UINT: 2,
    T.WCHAR: 2,
    T.DATE: 2,
    T.S5TIME: 2,
    T.COUNTER: 2,
    T.DWORD: 4,
    T.DINT: 4,
    T.UDINT: 4,
    T.REAL: 4,
    T.TIME: 4,
    T.TIME_OF_DAY: 4,
    T.LWORD: 8,
    T.LINT: 8,
    T.ULINT: 8,
    T.LREAL: 8,
    T.LTIME: 8,
    T.LTIME_OF_DAY: 8,
    T.DATE_AND_TIME: 8,
    T.LDT: 8,
    T.DTL: 12,
    T.STRING: 256,
    T.WSTRING: 512,
}


def map_data_type(data_type: Any, value_rank: Optional[int], vendor_namespace_index: int = 3) -> S7DataType:
    """Map an OPC UA data type node id and value rank to an S7 data type.

    Args:
        data_type: the DataType attribute, an ``asyncua.ua.NodeId``.
        value_rank: the ValueRank attribute, None counts as scalar.
        vendor_namespace_index: namespace index of the S7 vendor types.

    Returns:
        The S7 type, ``UNKNOWN`` if there is no mapping.

    Examples:
        >>> map_data_type(ua.NodeId(4, 0), -1)
        <S7DataType.INT: 'INT'>
        >>> map_data_type(ua.NodeId("DT_Foo", 3), -1)
        <S7DataType.UDT: 'UDT'>
    """
    if data_type is None:
        return T.UNKNOWN
    rank = SCALAR if value_rank is None else value_rank
    identifier = data_type.Identifier
    namespace = data_type.NamespaceIndex
    if namespace == BASE_NAMESPACE and isinstance(identifier, int):
        return BASE_TYPES.get((identifier, rank), T.UNKNOWN)
    if namespace == vendor_namespace_index:
        if isinstance(identifier, int):
            return VENDOR_NUMERIC_TYPES.get((identifier, rank), T.UNKNOWN)
        if isinstance(identifier, str):
            mapped = VENDOR_STRING_TYPES.get((identifier, rank))
            if mapped is not None:
                return mapped
            return VENDOR_STRING_DEFAULTS.get(rank, T.UNKNOWN)
    return T.UNKNOWN


def udt_type_name(data_type: Any) -> Optional[str]:
    """The UDT name carried in a string data type id, None for numeric ids."""
    if data_type is None:
        return None
    identifier = data_type.Identifier
    return identifier if isinstance(identifier, str) else None


def wire_type(s7_type: S7DataType) -> Optional[ua.VariantType]:
    """The variant type to write `s7_type` with, None if unknown."""
    return WIRE_TYPES.get(s7_type.element_type)
