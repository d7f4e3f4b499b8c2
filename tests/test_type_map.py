import pytest
from asyncua import ua

from s7ua.types import RootNode, S7DataType, StatusCode
from s7ua.ua.status import is_good, to_status_code
from s7ua.ua.type_map import map_data_type, udt_type_name, wire_type


class TestMapDataType:
    @pytest.mark.parametrize(
        "identifier, rank, expected",
        [
            (1, -1, S7DataType.BOOL),
            (4, -1, S7DataType.INT),
            (10, -1, S7DataType.REAL),
            (12, -1, S7DataType.WSTRING),
            (13, -1, S7DataType.LDT),
            (4, 1, S7DataType.ARRAY_OF_INT),
            (99, -1, S7DataType.UNKNOWN),
        ],
    )
    def test_base_namespace(self, identifier, rank, expected):
        assert map_data_type(ua.NodeId(identifier, 0), rank) == expected

    @pytest.mark.parametrize(
        "identifier, rank, expected",
        [
            (3001, -1, S7DataType.BYTE),
            (3005, -1, S7DataType.S5TIME),
            (3008, -1, S7DataType.DATE),
            (3014, -1, S7DataType.STRING),
            (3005, 1, S7DataType.ARRAY_OF_S5TIME),
            (3011, 1, S7DataType.DATE_AND_TIME),
            (3011, 2, S7DataType.ARRAY_OF_DATE_AND_TIME),
            (3011, -1, S7DataType.UNKNOWN),
        ],
    )
    def test_vendor_numeric(self, identifier, rank, expected):
        assert map_data_type(ua.NodeId(identifier, 3), rank) == expected

    def test_vendor_strings(self):
        assert map_data_type(ua.NodeId("DT_DTL", 3), -1) == S7DataType.DTL
        assert map_data_type(ua.NodeId("DT_DTL", 3), 1) == S7DataType.ARRAY_OF_DTL
        assert map_data_type(ua.NodeId("DT_Foo", 3), -1) == S7DataType.UDT
        assert map_data_type(ua.NodeId("DT_Foo", 3), 1) == S7DataType.ARRAY_OF_UDT

    def test_other_namespaces(self):
        assert map_data_type(ua.NodeId(4, 2), -1) == S7DataType.UNKNOWN
        assert map_data_type(ua.NodeId(3001, 4), -1) == S7DataType.UNKNOWN
        assert map_data_type(ua.NodeId(3001, 4), -1, vendor_namespace_index=4) == S7DataType.BYTE

    def test_missing_value_rank_is_scalar(self):
        assert map_data_type(ua.NodeId(6, 0), None) == S7DataType.DINT
        assert map_data_type(None, -1) == S7DataType.UNKNOWN

    def test_udt_type_name(self):
        assert udt_type_name(ua.NodeId("DT_Foo", 3)) == "DT_Foo"
        assert udt_type_name(ua.NodeId(3001, 3)) is None

    def test_wire_type(self):
        assert wire_type(S7DataType.INT) == ua.VariantType.Int16
        assert wire_type(S7DataType.ARRAY_OF_UINT) == ua.VariantType.UInt16
        assert wire_type(S7DataType.UDT) is None


class TestStatus:
    def test_to_status_code(self):
        assert to_status_code(ua.StatusCodes.Good) == StatusCode.GOOD
        assert to_status_code(ua.StatusCodes.UncertainLastUsableValue) == StatusCode.UNCERTAIN
        assert to_status_code(ua.StatusCodes.BadNodeIdUnknown) == StatusCode.BAD
        assert to_status_code(ua.StatusCode(ua.StatusCodes.BadTypeMismatch)) == StatusCode.BAD

    def test_is_good(self):
        assert is_good(0)
        assert not is_good(ua.StatusCodes.UncertainLastUsableValue)


class TestTypes:
    def test_array_properties(self):
        assert S7DataType.ARRAY_OF_DTL.is_array
        assert S7DataType.ARRAY_OF_DTL.element_type == S7DataType.DTL
        assert S7DataType.INT.element_type == S7DataType.INT
        assert S7DataType.UDT.is_struct
        assert not S7DataType.ARRAY_OF_UDT.is_struct

    def test_root_node_ids(self):
        assert RootNode.DATA_BLOCKS_GLOBAL.node_id() == "ns=3;s=DataBlocksGlobal"
        assert RootNode.COUNTERS.node_id(4) == "ns=4;s=Counters"
