import threading

import pytest

from s7ua.error import NotFoundError
from s7ua.structure import Variable
from s7ua.types import S7DataType
from s7ua.udt import UdtDefinition, UdtMemberDefinition, UdtTypeRegistry
from s7ua.converters import CustomUdtConverter


def converter(name: str = "DT_Motor") -> CustomUdtConverter:
    return CustomUdtConverter(name, dict, decode=lambda m: dict(m), encode=lambda d: d)


class TestDefinitions:
    def test_register_and_get(self, registry: UdtTypeRegistry):
        registry.register_udt_definition(UdtDefinition(name="DT_Motor", size_in_bytes=4))
        assert registry.has_udt_definition("DT_Motor")
        assert registry.get_udt_definition("DT_Motor").size_in_bytes == 4
        assert list(registry.get_all_udt_definitions()) == ["DT_Motor"]

    def test_name_required(self, registry: UdtTypeRegistry):
        with pytest.raises(ValueError):
            registry.register_udt_definition(UdtDefinition(name=""))

    def test_placeholder_first_seen_wins(self, registry: UdtTypeRegistry):
        first = registry.register_placeholder("DT_Foo", "ns=3;s=DT_Foo")
        second = registry.register_placeholder("DT_Foo", "ns=3;s=Other")
        assert second is first
        assert registry.get_udt_definition("DT_Foo").data_type_node_id == "ns=3;s=DT_Foo"
        assert first.is_placeholder

    def test_enrich(self, registry: UdtTypeRegistry):
        registry.register_placeholder("DT_Foo")
        members = [
            Variable(display_name="A", s7_type=S7DataType.INT),
            Variable(display_name="B", s7_type=S7DataType.DTL),
            Variable(display_name="C", s7_type=S7DataType.BOOL),
        ]
        definition = registry.enrich_udt_definition("DT_Foo", members)
        assert [(m.name, m.offset, m.size_in_bytes) for m in definition.members] == [("A", 0, 2), ("B", 2, 12), ("C", 14, 1)]
        assert definition.size_in_bytes == 15
        assert registry.get_udt_definition("DT_Foo") == definition

    def test_enrich_keeps_complete_definitions(self, registry: UdtTypeRegistry):
        complete = UdtDefinition(name="DT_Foo", members=(UdtMemberDefinition("X", S7DataType.REAL),))
        registry.register_udt_definition(complete)
        registry.enrich_udt_definition("DT_Foo", [Variable(display_name="A", s7_type=S7DataType.INT)])
        assert registry.get_udt_definition("DT_Foo") is complete
        assert registry.enrich_udt_definition("DT_Missing", []) is None

    def test_require(self, registry: UdtTypeRegistry):
        with pytest.raises(NotFoundError) as excinfo:
            registry.require_udt_definition("DT_Missing")
        assert "DT_Missing" in str(excinfo.value)

    def test_remove_and_clear(self, registry: UdtTypeRegistry):
        registry.register_placeholder("DT_A")
        registry.register_placeholder("DT_B")
        assert registry.remove_udt_definition("DT_A")
        assert not registry.remove_udt_definition("DT_A")
        registry.clear_udt_definitions()
        assert registry.get_all_udt_definitions() == {}

    def test_concurrent_placeholders(self, registry: UdtTypeRegistry):
        kept = []

        def register():
            kept.append(registry.register_placeholder("DT_Shared"))

        threads = [threading.Thread(target=register) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert all(definition is kept[0] for definition in kept)


class TestMemberDefinition:
    def test_properties(self):
        assert UdtMemberDefinition("A", S7DataType.INT, array_length=4).is_array
        assert UdtMemberDefinition("A", S7DataType.ARRAY_OF_INT).is_array
        assert not UdtMemberDefinition("A", S7DataType.INT).is_array
        assert UdtMemberDefinition("A", S7DataType.UDT, udt_type_name="DT_X").is_nested_udt
        assert not UdtMemberDefinition("A", S7DataType.STRUCT).is_nested_udt


class TestConverters:
    def test_register_and_get(self, registry: UdtTypeRegistry):
        motor = converter()
        registry.register_custom_converter(motor)
        assert registry.has_custom_converter("DT_Motor")
        assert registry.get_custom_converter("DT_Motor") is motor
        assert registry.get_udt_type("DT_Motor") is dict
        assert registry.get_all_custom_converters() == {"DT_Motor": motor}

    def test_register_under_other_name(self, registry: UdtTypeRegistry):
        registry.register_custom_converter(converter(), "DT_Pump")
        assert registry.has_custom_converter("DT_Pump")

    def test_missing(self, registry: UdtTypeRegistry):
        assert registry.get_custom_converter("DT_Motor") is None
        assert registry.get_custom_converter(None) is None
        assert registry.get_udt_type("DT_Motor") is None

    def test_remove_and_clear(self, registry: UdtTypeRegistry):
        registry.register_custom_converter(converter("DT_A"))
        registry.register_custom_converter(converter("DT_B"))
        assert registry.remove_custom_converter("DT_A")
        assert not registry.has_custom_converter("DT_A")
        registry.register_placeholder("DT_B")
        registry.clear()
        assert registry.get_all_custom_converters() == {}
        assert registry.get_all_udt_definitions() == {}
