"""
Type definitions shared by the s7ua modules.
"""

from enum import Enum


class S7DataType(str, Enum):
    """PLC data types as exposed by the S7 OPC UA server."""

    BOOL = "BOOL"
    BYTE = "BYTE"
    WORD = "WORD"
    DWORD = "DWORD"
    LWORD = "LWORD"
    SINT = "SINT"
    USINT = "USINT"
    INT = "INT"
    UINT = "UINT"
    DINT = "DINT"
    UDINT = "UDINT"
    LINT = "LINT"
    ULINT = "ULINT"
    REAL = "REAL"
    LREAL = "LREAL"
    CHAR = "CHAR"
    WCHAR = "WCHAR"
    STRING = "STRING"
    WSTRING = "WSTRING"
    DATE = "DATE"
    TIME = "TIME"
    LTIME = "LTIME"
    TIME_OF_DAY = "TIME_OF_DAY"
    LTIME_OF_DAY = "LTIME_OF_DAY"
    S5TIME = "S5TIME"
    DATE_AND_TIME = "DATE_AND_TIME"
    LDT = "LDT"
    DTL = "DTL"
    COUNTER = "COUNTER"

    ARRAY_OF_BOOL = "ARRAY_OF_BOOL"
    ARRAY_OF_BYTE = "ARRAY_OF_BYTE"
    ARRAY_OF_WORD = "ARRAY_OF_WORD"
    ARRAY_OF_DWORD = "ARRAY_OF_DWORD"
    ARRAY_OF_LWORD = "ARRAY_OF_LWORD"
    ARRAY_OF_SINT = "ARRAY_OF_SINT"
    ARRAY_OF_USINT = "ARRAY_OF_USINT"
    ARRAY_OF_INT = "ARRAY_OF_INT"
    ARRAY_OF_UINT = "ARRAY_OF_UINT"
    ARRAY_OF_DINT = "ARRAY_OF_DINT"
    ARRAY_OF_UDINT = "ARRAY_OF_UDINT"
    ARRAY_OF_LINT = "ARRAY_OF_LINT"
    ARRAY_OF_ULINT = "ARRAY_OF_ULINT"
    ARRAY_OF_REAL = "ARRAY_OF_REAL"
    ARRAY_OF_LREAL = "ARRAY_OF_LREAL"
    ARRAY_OF_CHAR = "ARRAY_OF_CHAR"
    ARRAY_OF_WCHAR = "ARRAY_OF_WCHAR"
    ARRAY_OF_STRING = "ARRAY_OF_STRING"
    ARRAY_OF_WSTRING = "ARRAY_OF_WSTRING"
    ARRAY_OF_DATE = "ARRAY_OF_DATE"
    ARRAY_OF_TIME = "ARRAY_OF_TIME"
    ARRAY_OF_LTIME = "ARRAY_OF_LTIME"
    ARRAY_OF_TIME_OF_DAY = "ARRAY_OF_TIME_OF_DAY"
    ARRAY_OF_LTIME_OF_DAY = "ARRAY_OF_LTIME_OF_DAY"
    ARRAY_OF_S5TIME = "ARRAY_OF_S5TIME"
    ARRAY_OF_DATE_AND_TIME = "ARRAY_OF_DATE_AND_TIME"
    ARRAY_OF_LDT = "ARRAY_OF_LDT"
    ARRAY_OF_DTL = "ARRAY_OF_DTL"
    ARRAY_OF_COUNTER = "ARRAY_OF_COUNTER"
    ARRAY_OF_UDT = "ARRAY_OF_UDT"

    STRUCT = "STRUCT"
    UDT = "UDT"
    UNKNOWN = "UNKNOWN"

    @property
    def is_array(self) -> bool:
        return self.value.startswith("ARRAY_OF_")

    @property
    def is_struct(self) -> bool:
        return self in (S7DataType.STRUCT, S7DataType.UDT)

    @property
    def element_type(self) -> "S7DataType":
        """The scalar type of an array type, or the type itself."""
        if self.is_array:
            return S7DataType(self.value[len("ARRAY_OF_") :])
        return self


class StatusCode(str, Enum):
    """Quality of a variable value as seen by callers."""

    GOOD = "Good"
    UNCERTAIN = "Uncertain"
    BAD = "Bad"
    # never read yet
    WAITING = "Waiting"


class NodeKind(str, Enum):
    """Tag of the node variants in :mod:`s7ua.structure`."""

    GLOBAL_DATA_BLOCK = "GlobalDataBlock"
    INSTANCE_DATA_BLOCK = "InstanceDataBlock"
    INSTANCE_DB_SECTION = "InstanceDbSection"
    STRUCTURE_ELEMENT = "StructureElement"
    VARIABLE = "Variable"


class RootNode(str, Enum):
    """Browse names of the well known roots in the vendor namespace."""

    DATA_BLOCKS_GLOBAL = "DataBlocksGlobal"
    DATA_BLOCKS_INSTANCE = "DataBlocksInstance"
    MEMORY = "Memory"
    INPUTS = "Inputs"
    OUTPUTS = "Outputs"
    TIMERS = "Timers"
    COUNTERS = "Counters"

    def node_id(self, namespace_index: int = 3) -> str:
        return f"ns={namespace_index};s={self.value}"


# browse name of a cosmetic child the server adds to blocks and areas
ICON_NODE_NAME = "Icon"

# display names of the four sections of an instance data block
SECTION_INPUTS = "Inputs"
SECTION_OUTPUTS = "Outputs"
SECTION_IN_OUTS = "InOuts"
SECTION_STATIC = "Static"

DEFAULT_MAX_DISCOVERY_DEPTH = 10
