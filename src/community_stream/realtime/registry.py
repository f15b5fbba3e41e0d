"""Registry of live realtime sessions, one per user."""
import asyncio
import logging
from typing import Any, Protocol

from fastapi import WebSocket
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)


class Session(Protocol):
    """One live connection the server can push JSON frames into."""

    @property
    def is_writable(self) -> bool: ...

    async def send_json(self, frame: dict[str, Any]) -> None: ...


class WebSocketSession:
    """Session over a FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    @property
    def websocket(self) -> WebSocket:
        return self._websocket

    @property
    def is_writable(self) -> bool:
        return (
            self._websocket.client_state == WebSocketState.CONNECTED
            and self._websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_json(self, frame: dict[str, Any]) -> None:
        await self._websocket.send_json(frame)


class SessionRegistry:
    """Maps userId to its live session.

    Owned by the application container and passed to whoever broadcasts, so
    a shared pub/sub backend can replace it without touching call sites.
    Single event loop: no locking needed.

    Each send is bounded by send_timeout seconds; a session that does not
    take a frame in time is treated like a failed one and dropped.
    """

    def __init__(self, send_timeout: float = 5.0) -> None:
        self._sessions: dict[str, Session] = {}
        self._send_timeout = send_timeout

    def register(self, user_id: str, session: Session) -> None:
        """Record the session for user_id, replacing any previous one."""
        if user_id in self._sessions:
            logger.info("Session for %s replaced by a new connection", user_id)
        self._sessions[user_id] = session

    def unregister(self, user_id: str, session: Session | None = None) -> None:
        """Forget user_id's session. Safe to call more than once.

        When session is given, only that exact session is removed: a
        connection that was already replaced must not evict its successor.
        """
        current = self._sessions.get(user_id)
        if current is None:
            return
        if session is not None and current is not session:
            return
        del self._sessions[user_id]

    def get(self, user_id: str) -> Session | None:
        return self._sessions.get(user_id)

    def connected_users(self) -> list[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions

    async def broadcast(self, frame: dict[str, Any]) -> int:
        """Send frame to every writable session; return how many got it.

        Sessions that are not writable are skipped (no queue, no retry).
        Sessions whose send fails or times out are purged.
        """
        delivered = 0
        for user_id, session in list(self._sessions.items()):
            if not session.is_writable:
                continue
            if await self._deliver(user_id, session, frame):
                delivered += 1
        return delivered

    async def send_to(self, user_id: str, frame: dict[str, Any]) -> bool:
        """Send frame to one user's session; False when not delivered."""
        session = self._sessions.get(user_id)
        if session is None or not session.is_writable:
            return False
        return await self._deliver(user_id, session, frame)

    async def _deliver(self, user_id: str, session: Session, frame: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(session.send_json(frame), self._send_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Dropping session for %s: send blocked for %.1fs", user_id, self._send_timeout
            )
            self.unregister(user_id, session)
            return False
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Dropping session for %s after send error: %s", user_id, exc)
            self.unregister(user_id, session)
            return False
        return True
