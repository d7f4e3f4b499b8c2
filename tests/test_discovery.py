import pytest
from asyncua import ua

from s7ua.discovery import StructureDiscovery
from s7ua.structure import GlobalDataBlock, InstanceDataBlock, InstanceDbSection, StructureElement, Variable
from s7ua.types import RootNode, S7DataType, StatusCode
from s7ua.udt.definition import UdtDefinition
from s7ua.udt.registry import UdtTypeRegistry

from fakes import FakeSession, base_type, build_test_db, vendor_type

pytestmark = pytest.mark.asyncio


def names(variables):
    return [variable.display_name for variable in variables]


async def test_global_data_block(session: FakeSession, registry: UdtTypeRegistry):
    build_test_db(session)
    block = await StructureDiscovery(registry).discover(session, GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db"))

    assert names(block.variables) == ["Speed", "Delay", "TestStruct"]
    speed, delay, struct = block.variables
    assert speed.s7_type == S7DataType.INT
    assert delay.s7_type == S7DataType.S5TIME
    assert struct.s7_type == S7DataType.UDT
    assert struct.udt_type_name == "DT_TestStruct"
    assert names(struct.struct_members) == ["TestStructBool", "TestStructInt", "TestDateAndTime"]
    assert struct.struct_members[2].s7_type == S7DataType.DATE_AND_TIME


async def test_discovery_does_not_read_values(session: FakeSession, registry: UdtTypeRegistry):
    build_test_db(session)
    block = await StructureDiscovery(registry).discover(session, GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db"))
    for variable in block.variables:
        assert variable.value is None
        assert variable.full_path is None
        assert variable.status_code == StatusCode.WAITING


async def test_input_shell_is_unchanged(session: FakeSession, registry: UdtTypeRegistry):
    build_test_db(session)
    shell = GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db")
    await StructureDiscovery(registry).discover(session, shell)
    assert shell.variables == ()


async def test_udt_placeholder(session: FakeSession, registry: UdtTypeRegistry):
    """A member typed by the vendor string id DT_Foo becomes a UDT and registers DT_Foo."""
    session.add_object(None, "ns=3;s=Db", "Db")
    session.add_variable("ns=3;s=Db", "ns=3;s=Db.Foo", "Foo", vendor_type("DT_Foo"))

    block = await StructureDiscovery(registry).discover(session, GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db"))

    (foo,) = block.variables
    assert foo.s7_type == S7DataType.UDT
    assert foo.udt_type_name == "DT_Foo"
    definition = registry.get_udt_definition("DT_Foo")
    assert definition.name == "DT_Foo"
    assert definition.data_type_node_id == "ns=3;s=DT_Foo"


async def test_existing_definition_is_kept(session: FakeSession, registry: UdtTypeRegistry):
    existing = UdtDefinition(name="DT_TestStruct", description="from the project")
    registry.register_udt_definition(existing)
    build_test_db(session)
    await StructureDiscovery(registry).discover(session, GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db"))
    assert registry.get_udt_definition("DT_TestStruct").description == "from the project"


async def test_placeholder_is_enriched(session: FakeSession, registry: UdtTypeRegistry):
    build_test_db(session)
    await StructureDiscovery(registry).discover(session, GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db"))
    definition = registry.get_udt_definition("DT_TestStruct")
    assert [member.name for member in definition.members] == ["TestStructBool", "TestStructInt", "TestDateAndTime"]
    assert definition.size_in_bytes == 1 + 2 + 8


async def test_icon_is_filtered_for_every_node_class(session: FakeSession, registry: UdtTypeRegistry):
    session.add_object(None, "ns=3;s=Fb", "Fb")
    session.add_object("ns=3;s=Fb", "ns=3;s=Fb.Icon", "Icon")
    session.add_object("ns=3;s=Fb", "ns=3;s=Fb.Static", "Static")
    session.add_object("ns=3;s=Fb.Static", "ns=3;s=Fb.Static.Icon", "Icon")
    session.add_variable("ns=3;s=Fb.Static", "ns=3;s=Fb.Static.Icon2", "Icon", base_type(15))
    session.add_variable("ns=3;s=Fb.Static", "ns=3;s=Fb.Static.Level", "Level", base_type(10))

    block = await StructureDiscovery(registry).discover(session, InstanceDataBlock(node_id="ns=3;s=Fb", display_name="Fb"))

    assert names(block.static.variables) == ["Level"]
    assert block.static.nested_instances == ()
    assert block.inputs is None


async def test_instance_data_block(session: FakeSession, registry: UdtTypeRegistry):
    session.add_object(None, "ns=3;s=Fb", "Fb")
    for section in ("Inputs", "Outputs", "InOuts", "Static", "Temp"):
        session.add_object("ns=3;s=Fb", f"ns=3;s=Fb.{section}", section)
    session.add_variable("ns=3;s=Fb.Inputs", "ns=3;s=Fb.Inputs.Start", "Start", base_type(1))
    session.add_variable("ns=3;s=Fb.Outputs", "ns=3;s=Fb.Outputs.Done", "Done", base_type(1))
    session.add_variable("ns=3;s=Fb.InOuts", "ns=3;s=Fb.InOuts.Count", "Count", base_type(6))
    session.add_variable("ns=3;s=Fb.Temp", "ns=3;s=Fb.Temp.X", "X", base_type(6))
    session.add_object("ns=3;s=Fb.Static", "ns=3;s=Fb.Static.Timer", "Timer")
    session.add_object("ns=3;s=Fb.Static.Timer", "ns=3;s=Fb.Static.Timer.Static", "Static")
    session.add_variable("ns=3;s=Fb.Static.Timer.Static", "ns=3;s=Fb.Static.Timer.Static.ET", "ET", vendor_type(3006))

    block = await StructureDiscovery(registry).discover(session, InstanceDataBlock(node_id="ns=3;s=Fb", display_name="Fb"))

    assert names(block.inputs.variables) == ["Start"]
    assert names(block.outputs.variables) == ["Done"]
    assert names(block.in_outs.variables) == ["Count"]
    assert block.in_outs.variables[0].s7_type == S7DataType.DINT
    assert [s.display_name for s in block.sections] == ["Inputs", "Outputs", "InOuts", "Static"]
    (timer,) = block.static.nested_instances
    assert timer.display_name == "Timer"
    assert timer.static.variables[0].s7_type == S7DataType.TIME


async def test_section(session: FakeSession, registry: UdtTypeRegistry):
    session.add_object(None, "ns=3;s=Sec", "Static")
    session.add_variable("ns=3;s=Sec", "ns=3;s=Sec.A", "A", base_type(4))
    session.add_object("ns=3;s=Sec", "ns=3;s=Sec.Inner", "Inner")

    section = await StructureDiscovery(registry).discover(session, InstanceDbSection(node_id="ns=3;s=Sec", display_name="Static"))

    assert names(section.variables) == ["A"]
    assert [n.display_name for n in section.nested_instances] == ["Inner"]


@pytest.mark.parametrize("area, expected", [("Counters", S7DataType.COUNTER), ("Timers", S7DataType.S5TIME)])
async def test_area_default_types(session: FakeSession, registry: UdtTypeRegistry, area, expected):
    session.add_object(None, f"ns=3;s={area}", area)
    session.add_variable(f"ns=3;s={area}", f"ns=3;s={area}.1", "C1", vendor_type(3002))

    element = await StructureDiscovery(registry).discover(session, StructureElement(node_id=f"ns=3;s={area}", display_name=area))

    assert element.variables[0].s7_type == expected


async def test_memory_keeps_types(session: FakeSession, registry: UdtTypeRegistry):
    session.add_object(None, "ns=3;s=Memory", "Memory")
    session.add_variable("ns=3;s=Memory", "ns=3;s=Memory.MW10", "MW10", vendor_type(3002))

    element = await StructureDiscovery(registry).discover(session, StructureElement(node_id="ns=3;s=Memory", display_name="Memory"))

    assert element.variables[0].s7_type == S7DataType.WORD


async def test_depth_limit(session: FakeSession, registry: UdtTypeRegistry):
    session.add_object(None, "ns=3;s=Db", "Db")
    session.add_variable("ns=3;s=Db", "ns=3;s=Db.Outer", "Outer", vendor_type("DT_Outer"))
    session.add_variable("ns=3;s=Db.Outer", "ns=3;s=Db.Outer.Inner", "Inner", vendor_type("DT_Inner"))
    session.add_variable("ns=3;s=Db.Outer.Inner", "ns=3;s=Db.Outer.Inner.Deep", "Deep", base_type(4))

    discovery = StructureDiscovery(registry, max_depth=1)
    block = await discovery.discover(session, GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db"))

    inner = block.variables[0].struct_members[0]
    assert inner.s7_type == S7DataType.UDT
    (deep,) = inner.struct_members
    assert deep.s7_type == S7DataType.UNKNOWN
    assert deep.struct_members == ()


async def test_cyclic_address_space_terminates(session: FakeSession, registry: UdtTypeRegistry):
    session.add_object(None, "ns=3;s=Db", "Db")
    loop = session.add_variable("ns=3;s=Db", "ns=3;s=Db.Loop", "Loop", vendor_type("DT_Loop"))
    loop.children.append(loop)

    block = await StructureDiscovery(registry, max_depth=3).discover(
        session, GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db")
    )

    variable = block.variables[0]
    depth = 0
    while variable.struct_members:
        variable = variable.struct_members[0]
        depth += 1
    assert depth == 4
    assert variable.s7_type == S7DataType.UNKNOWN


async def test_unknown_type(session: FakeSession, registry: UdtTypeRegistry):
    session.add_object(None, "ns=3;s=Db", "Db")
    session.add_variable("ns=3;s=Db", "ns=3;s=Db.X", "X", ua.NodeId(42, 7))
    session.add_variable("ns=3;s=Db", "ns=3;s=Db.Y", "Y", None)

    block = await StructureDiscovery(registry).discover(session, GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db"))

    assert [v.s7_type for v in block.variables] == [S7DataType.UNKNOWN, S7DataType.UNKNOWN]


async def test_struct_variable_shell(session: FakeSession, registry: UdtTypeRegistry):
    build_test_db(session)
    shell = Variable(node_id="ns=3;s=Db.TestStruct", display_name="TestStruct", s7_type=S7DataType.STRUCT)
    variable = await StructureDiscovery(registry).discover(session, shell)
    assert names(variable.struct_members) == ["TestStructBool", "TestStructInt", "TestDateAndTime"]


async def test_scalar_variable_shell(session: FakeSession, registry: UdtTypeRegistry):
    shell = Variable(node_id="ns=3;s=Db.Speed", display_name="Speed", s7_type=S7DataType.INT)
    assert await StructureDiscovery(registry).discover(session, shell) is shell


async def test_disconnected_session_returns_shell(registry: UdtTypeRegistry):
    session = FakeSession(connected=False)
    build_test_db(session)
    shell = GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db")
    discovery = StructureDiscovery(registry)
    assert await discovery.discover(session, shell) is shell
    assert await discovery.get_all_global_data_blocks(session) == []
    assert await discovery.get_structure_element(session, RootNode.INPUTS) is None


async def test_failed_browse_degrades(session: FakeSession, registry: UdtTypeRegistry):
    build_test_db(session)
    session.fail_browse = True
    block = await StructureDiscovery(registry).discover(session, GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db"))
    assert block.variables == ()


async def test_failed_type_read_degrades(session: FakeSession, registry: UdtTypeRegistry):
    build_test_db(session)
    session.fail_read = True
    block = await StructureDiscovery(registry).discover(session, GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db"))
    assert {v.s7_type for v in block.variables} == {S7DataType.UNKNOWN}


async def test_root_data_blocks(session: FakeSession, registry: UdtTypeRegistry):
    build_test_db(session)
    session.add_object(None, "ns=3;s=DataBlocksInstance", "DataBlocksInstance")
    session.add_object("ns=3;s=DataBlocksInstance", "ns=3;s=Fb", "Fb")
    discovery = StructureDiscovery(registry)

    assert await discovery.get_all_global_data_blocks(session) == [GlobalDataBlock(node_id="ns=3;s=Db", display_name="Db")]
    assert await discovery.get_all_instance_data_blocks(session) == [
        InstanceDataBlock(node_id="ns=3;s=Fb", display_name="Fb")
    ]


async def test_root_structure_element(session: FakeSession, registry: UdtTypeRegistry):
    session.add_object(None, "ns=3;s=Inputs", "Inputs")
    discovery = StructureDiscovery(registry)

    assert await discovery.get_structure_element(session, RootNode.INPUTS) == StructureElement(
        node_id="ns=3;s=Inputs", display_name="Inputs"
    )
    assert await discovery.get_structure_element(session, RootNode.OUTPUTS) is None
