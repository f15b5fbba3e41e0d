"""Community feed: store messages and fan them out to live sessions.

Two paths reach every client:
- push: post_message() broadcasts a newMessage frame to registered sessions;
- pull: recent_messages() returns the latest messages for bootstrap and for
  clients that poll instead of holding a connection.
A session that misses a push converges by pulling.
"""
import asyncio
import logging
from typing import Any

from community_stream.core.exceptions import AccessDeniedError
from community_stream.db.models import Message, MessageType, User
from community_stream.realtime.registry import SessionRegistry
from community_stream.schemas import MessageOut, NewMessageFrame, UserOut
from community_stream.services.access import AccessEvaluator
from community_stream.store import EntityStore

logger = logging.getLogger(__name__)


class MessageBroadcaster:
    """Access-checked message writes with realtime fan-out.

    Writes and their broadcasts are serialized, so frames leave in creation
    order and each registered session receives each message once.
    """

    def __init__(
        self,
        store: EntityStore,
        registry: SessionRegistry,
        access: AccessEvaluator,
    ) -> None:
        self._store = store
        self._registry = registry
        self._access = access
        self._write_lock = asyncio.Lock()

    async def post_message(
        self,
        user_id: str,
        content: str,
        message_type: MessageType | str = MessageType.USER,
        metadata: dict[str, Any] | None = None,
    ) -> MessageOut:
        """Store a message from user_id and broadcast it.

        Raises:
            AccessDeniedError: user_id has no active, unpaused stream.
        """
        if not await self._access.has_access(user_id):
            raise AccessDeniedError(user_id)

        async with self._write_lock:
            message = await self._store.insert(
                Message,
                {
                    "user_id": user_id,
                    "content": content,
                    "message_type": MessageType(message_type),
                    "meta": metadata,
                },
            )
            joined = await self._join_author(message)
            frame = NewMessageFrame(message=joined).model_dump(mode="json", by_alias=True)
            delivered = await self._registry.broadcast(frame)
        logger.debug("Message %s from %s delivered to %d sessions", message.id, user_id, delivered)
        return joined

    async def recent_messages(self, limit: int = 50) -> list[MessageOut]:
        """Latest messages, newest first, each with its author."""
        messages = await self._store.latest(Message, limit)
        return [await self._join_author(m) for m in messages]

    async def _join_author(self, message: Message) -> MessageOut:
        user = await self._store.get(User, message.user_id)
        author = UserOut.from_entity(user) if user is not None else None
        return MessageOut.from_entity(message, user=author)
