"""
:class:`~s7ua.ua.session.Session` implementation on top of asyncua.
"""

import asyncio
import logging
from typing import Any, List, Sequence, Tuple

from asyncua import Client, ua
from asyncua.client.ua_client import UASocketState

from ..config import ClientConfig
from ..error import SessionError
from .session import BrowseResult, ReadResult

logger = logging.getLogger(__name__)

# errors of a failed request, as opposed to Bad status codes of single items
TRANSPORT_ERRORS = (ua.UaError, OSError, asyncio.TimeoutError)


class AsyncuaSession:
    """A connected asyncua client exposed through the Session services."""

    def __init__(self, client: Client):
        self._client = client
        self._closed = False

    @property
    def client(self) -> Client:
        return self._client

    @property
    def connected(self) -> bool:
        if self._closed:
            return False
        protocol = self._client.uaclient.protocol
        return protocol is not None and protocol.state == UASocketState.OPEN

    async def browse(self, node_id: str, node_class_mask: int) -> List[BrowseResult]:
        try:
            node = self._client.get_node(node_id)
            references = await node.get_references(
                refs=ua.ObjectIds.HierarchicalReferences,
                direction=ua.BrowseDirection.Forward,
                nodeclassmask=node_class_mask,
                includesubtypes=True,
            )
        except TRANSPORT_ERRORS as e:
            raise SessionError(f"Browse of {node_id} failed: {e}") from e
        return [
            BrowseResult(
                node_id=reference.NodeId.to_string(),
                display_name=reference.DisplayName.Text or "",
                node_class=reference.NodeClass,
            )
            for reference in references
        ]

    async def read(self, items: Sequence[Tuple[str, ua.AttributeIds]]) -> List[ReadResult]:
        params = ua.ReadParameters()
        for node_id, attribute in items:
            read_value = ua.ReadValueId()
            read_value.NodeId = ua.NodeId.from_string(node_id)
            read_value.AttributeId = attribute
            params.NodesToRead.append(read_value)
        try:
            data_values = await self._client.uaclient.read(params)
        except TRANSPORT_ERRORS as e:
            raise SessionError(f"Read of {len(items)} items failed: {e}") from e
        return [
            ReadResult(value=data_value.Value.Value if data_value.Value is not None else None, status=data_value.StatusCode.value)
            for data_value in data_values
        ]

    async def write(self, items: Sequence[Tuple[str, Any]]) -> List[int]:
        params = ua.WriteParameters()
        for node_id, value in items:
            variant = value if isinstance(value, ua.Variant) else ua.Variant(value)
            write_value = ua.WriteValue()
            write_value.NodeId = ua.NodeId.from_string(node_id)
            write_value.AttributeId = ua.AttributeIds.Value
            write_value.Value = ua.DataValue(variant)
            params.NodesToWrite.append(write_value)
        try:
            results = await self._client.uaclient.write(params)
        except TRANSPORT_ERRORS as e:
            raise SessionError(f"Write of {len(items)} items failed: {e}") from e
        return [status.value for status in results]

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._client.disconnect()
        except TRANSPORT_ERRORS as e:
            logger.warning(f"Error while closing session: {e}")


async def create_session(config: ClientConfig, endpoint: str) -> AsyncuaSession:
    """Connect a new asyncua client to `endpoint`.

    This is the default :data:`~s7ua.ua.session.SessionFactory`.

    Raises:
        SessionError: if the connection can't be established.
    """
    client = Client(url=endpoint, timeout=config.request_timeout)
    client.name = config.application_name
    client.application_uri = config.application_uri
    client.session_timeout = int(config.session_timeout * 1000)
    if config.username:
        client.set_user(config.username)
    if config.password:
        client.set_password(config.password)
    try:
        if config.security_string:
            await client.set_security_string(config.security_string)
        await client.connect()
    except TRANSPORT_ERRORS as e:
        raise SessionError(f"Could not connect to {endpoint}: {e}") from e
    logger.debug(f"connected session to {endpoint}")
    return AsyncuaSession(client)
