import asyncio
from types import SimpleNamespace

import pytest
from asyncua import ua
from asyncua.client.ua_client import UASocketState

from s7ua.error import SessionError
from s7ua.ua.asyncua_session import AsyncuaSession
from s7ua.ua.session import BrowseResult, ReadResult

pytestmark = pytest.mark.asyncio


class StubNode:
    def __init__(self, client, node_id):
        self.client = client
        self.node_id = node_id

    async def get_references(self, **kwargs):
        self.client.browse_calls.append((self.node_id, kwargs))
        if self.client.error is not None:
            raise self.client.error
        return self.client.references


class StubUaClient:
    """Stands in for ``asyncua.client.ua_client.UaClient``."""

    def __init__(self, client):
        self._client = client
        self.protocol = SimpleNamespace(state=UASocketState.OPEN)

    async def read(self, params):
        self._client.read_params.append(params)
        if self._client.error is not None:
            raise self._client.error
        return self._client.data_values

    async def write(self, params):
        self._client.write_params.append(params)
        if self._client.error is not None:
            raise self._client.error
        return [ua.StatusCode(self._client.write_status) for _ in params.NodesToWrite]


class StubClient:
    """Stands in for ``asyncua.Client`` with a connected ``uaclient``."""

    def __init__(self):
        self.uaclient = StubUaClient(self)
        self.error = None
        self.references = []
        self.data_values = []
        self.write_status = ua.StatusCodes.Good
        self.browse_calls = []
        self.read_params = []
        self.write_params = []
        self.disconnects = 0

    def get_node(self, node_id):
        return StubNode(self, node_id)

    async def disconnect(self):
        self.disconnects += 1
        if self.error is not None:
            raise self.error


@pytest.fixture
def client() -> StubClient:
    return StubClient()


class TestConnected:
    async def test_open(self, client: StubClient):
        assert AsyncuaSession(client).connected

    async def test_socket_closed(self, client: StubClient):
        client.uaclient.protocol.state = UASocketState.CLOSED
        assert not AsyncuaSession(client).connected

    async def test_no_protocol(self, client: StubClient):
        client.uaclient.protocol = None
        assert not AsyncuaSession(client).connected

    async def test_after_close(self, client: StubClient):
        session = AsyncuaSession(client)
        await session.close()
        assert not session.connected


class TestBrowse:
    async def test_forward_hierarchical_references(self, client: StubClient):
        client.references = [
            SimpleNamespace(
                NodeId=ua.NodeId("Db.Speed", 3),
                DisplayName=ua.LocalizedText(Text="Speed"),
                NodeClass=ua.NodeClass.Variable,
            ),
            SimpleNamespace(
                NodeId=ua.NodeId("Db.Unnamed", 3),
                DisplayName=ua.LocalizedText(Text=None),
                NodeClass=ua.NodeClass.Object,
            ),
        ]

        results = await AsyncuaSession(client).browse("ns=3;s=Db", int(ua.NodeClass.Variable))

        assert results == [
            BrowseResult("ns=3;s=Db.Speed", "Speed", ua.NodeClass.Variable),
            BrowseResult("ns=3;s=Db.Unnamed", "", ua.NodeClass.Object),
        ]
        ((node_id, kwargs),) = client.browse_calls
        assert node_id == "ns=3;s=Db"
        assert kwargs["refs"] == ua.ObjectIds.HierarchicalReferences
        assert kwargs["direction"] == ua.BrowseDirection.Forward
        assert kwargs["nodeclassmask"] == int(ua.NodeClass.Variable)

    async def test_transport_error(self, client: StubClient):
        client.error = ConnectionResetError("reset by peer")
        with pytest.raises(SessionError):
            await AsyncuaSession(client).browse("ns=3;s=Db", int(ua.NodeClass.Variable))


class TestRead:
    async def test_read(self, client: StubClient):
        client.data_values = [
            SimpleNamespace(Value=ua.Variant(1200, ua.VariantType.Int16), StatusCode=ua.StatusCode(ua.StatusCodes.Good)),
            SimpleNamespace(Value=None, StatusCode=ua.StatusCode(ua.StatusCodes.BadNodeIdUnknown)),
        ]

        results = await AsyncuaSession(client).read(
            [("ns=3;s=Db.Speed", ua.AttributeIds.Value), ("ns=3;s=Db.Gone", ua.AttributeIds.DataType)]
        )

        assert results == [
            ReadResult(1200, ua.StatusCodes.Good),
            ReadResult(None, ua.StatusCodes.BadNodeIdUnknown),
        ]
        (params,) = client.read_params
        assert [item.NodeId for item in params.NodesToRead] == [ua.NodeId("Db.Speed", 3), ua.NodeId("Db.Gone", 3)]
        assert [item.AttributeId for item in params.NodesToRead] == [ua.AttributeIds.Value, ua.AttributeIds.DataType]

    async def test_timeout(self, client: StubClient):
        client.error = asyncio.TimeoutError()
        with pytest.raises(SessionError):
            await AsyncuaSession(client).read([("ns=3;s=Db.Speed", ua.AttributeIds.Value)])


class TestWrite:
    async def test_write(self, client: StubClient):
        variant = ua.Variant(999, ua.VariantType.Int16)

        statuses = await AsyncuaSession(client).write([("ns=3;s=Db.Speed", variant), ("ns=3;s=Db.Name", "pump")])

        assert statuses == [ua.StatusCodes.Good, ua.StatusCodes.Good]
        (params,) = client.write_params
        speed, name = params.NodesToWrite
        assert speed.NodeId == ua.NodeId("Db.Speed", 3)
        assert speed.AttributeId == ua.AttributeIds.Value
        assert speed.Value.Value == variant
        assert name.Value.Value.Value == "pump"

    async def test_rejected(self, client: StubClient):
        client.write_status = ua.StatusCodes.BadTypeMismatch
        statuses = await AsyncuaSession(client).write([("ns=3;s=Db.Speed", ua.Variant(999, ua.VariantType.Int16))])
        assert statuses == [ua.StatusCodes.BadTypeMismatch]

    async def test_transport_error(self, client: StubClient):
        client.error = OSError("connection lost")
        with pytest.raises(SessionError):
            await AsyncuaSession(client).write([("ns=3;s=Db.Speed", ua.Variant(999, ua.VariantType.Int16))])


class TestClose:
    async def test_close_once(self, client: StubClient):
        session = AsyncuaSession(client)
        await session.close()
        await session.close()
        assert client.disconnects == 1

    async def test_close_error_is_logged(self, client: StubClient):
        client.error = OSError("connection lost")
        session = AsyncuaSession(client)
        await session.close()
        assert client.disconnects == 1
        assert not session.connected
