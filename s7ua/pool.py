"""
A bounded pool of OPC UA sessions.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from .error import PoolClosedError, PoolNotInitializedError, ResourceExhaustionError
from .ua.session import Session, SessionFactory

logger = logging.getLogger(__name__)

T = TypeVar("T")

# handed from waiter to waiter once the pool is closed
_CLOSED = object()


class SessionPool:
    """Lends sessions to one operation at a time.

    The idle sessions live in an :class:`asyncio.Queue`, so taking a session
    and taking a permit are the same step: a borrower waits until a session is
    idle, and the number of idle sessions is the number of free permits.
    Sessions that dropped their connection are replaced when they are lent.

    Examples:
        >>> pool = SessionPool(create_session, max_sessions=5)
        >>> await pool.initialize(ClientConfig(), "opc.tcp://192.168.0.1:4840")
        >>> await pool.execute_with_session(lambda session: session.browse(node_id, mask))
    """

    def __init__(self, session_factory: SessionFactory, max_sessions: int = 5):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._factory = session_factory
        self._max_sessions = max_sessions
        self._idle: Optional[asyncio.Queue] = None
        self._members: List[Session] = []
        self._config: Any = None
        self._endpoint: Optional[str] = None
        self._closed = False

    @property
    def max_sessions(self) -> int:
        return self._max_sessions

    @property
    def initialized(self) -> bool:
        return self._idle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def available_sessions(self) -> int:
        """Sessions that can be borrowed without waiting."""
        if self._idle is None or self._closed:
            return 0
        return self._idle.qsize()

    async def initialize(self, config: Any, endpoint: str) -> None:
        """Create all sessions of the pool.

        Calling it again, e.g. after a reconnect, replaces the sessions. Old
        sessions that are lent out are closed when they come back.

        Raises:
            ResourceExhaustionError: if not every session could be created.
                The ones that were created are closed again.
        """
        if self._closed:
            raise PoolClosedError("Session pool is closed")
        created: List[Session] = []
        try:
            for _ in range(self._max_sessions):
                created.append(await self._factory(config, endpoint))
                logger.debug(f"created session {len(created)} of {self._max_sessions} for {endpoint}")
        except asyncio.CancelledError:
            await self._close_sessions(created)
            raise
        except Exception as e:
            count = len(created)
            await self._close_sessions(created)
            raise ResourceExhaustionError(
                f"Failed to initialize session pool. Could only create {count} out of {self._max_sessions} "
                f"required sessions: {e}"
            ) from e

        previous = self._idle
        idle: asyncio.Queue = asyncio.Queue()
        for session in created:
            idle.put_nowait(session)
        self._config = config
        self._endpoint = endpoint
        self._members = created
        self._idle = idle
        if previous is not None:
            await self._close_sessions(self._drain(previous))
        logger.info(f"session pool initialized with {self._max_sessions} sessions for {endpoint}")

    async def execute_with_session(self, operation: Callable[[Session], Awaitable[T]]) -> T:
        """Run `operation` with a borrowed session.

        Waits while all sessions are lent out. The session goes back to the
        pool however `operation` ends.

        Raises:
            PoolNotInitializedError: before :meth:`initialize`.
            PoolClosedError: after :meth:`close`.
        """
        if self._closed:
            raise PoolClosedError("Session pool is closed")
        idle = self._idle
        if idle is None:
            raise PoolNotInitializedError("Session pool is not initialized. Call initialize() first.")

        session = await idle.get()
        if session is _CLOSED:
            idle.put_nowait(_CLOSED)
            raise PoolClosedError("Session pool is closed")
        try:
            if not session.connected:
                dead, session = session, await self._replace(session)
                await self._discard(dead)
            return await operation(session)
        finally:
            await self._return(idle, session)

    async def _replace(self, dead: Session) -> Session:
        logger.warning("Session is disconnected, creating a replacement")
        replacement = await self._factory(self._config, self._endpoint)
        self._members = [replacement if s is dead else s for s in self._members]
        return replacement

    @staticmethod
    async def _discard(dead: Session) -> None:
        try:
            await dead.close()
        except Exception as e:
            logger.warning(f"Error while closing a disconnected session: {e}")

    async def _return(self, idle: asyncio.Queue, session: Session) -> None:
        if not self._closed and idle is self._idle and any(s is session for s in self._members):
            idle.put_nowait(session)
            return
        # closed pool or a session of a previous initialize
        await session.close()

    async def close(self) -> None:
        """Close all sessions and stop lending.

        Idle sessions are closed right away, lent ones when they come back.
        Tasks waiting for a session get a PoolClosedError.
        """
        if self._closed:
            return
        self._closed = True
        if self._idle is None:
            return
        sessions = self._drain(self._idle)
        self._idle.put_nowait(_CLOSED)
        await self._close_sessions(sessions)
        logger.info("session pool closed")

    @staticmethod
    def _drain(idle: asyncio.Queue) -> List[Session]:
        sessions = []
        while not idle.empty():
            session = idle.get_nowait()
            if session is not _CLOSED:
                sessions.append(session)
        return sessions

    @staticmethod
    async def _close_sessions(sessions: List[Session]) -> None:
        for session in sessions:
            await session.close()

    async def __aenter__(self) -> "SessionPool":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()
