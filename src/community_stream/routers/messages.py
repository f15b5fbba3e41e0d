"""Community feed routes: the pull side of the chat.

Clients that cannot hold a WebSocket poll GET /api/messages; POST stores a
message and pushes it to every connected session.
"""
from fastapi import APIRouter, Query

from community_stream.core import ErrorMapper
from community_stream.deps import MessageBroadcasterDep, SettingsDep
from community_stream.schemas import MessageCreate, MessageEnvelope, MessagesEnvelope

router = APIRouter(prefix="/api/messages", tags=["messages"])

_read_errors = ErrorMapper(resource_name="Message", failure_message="Failed to get messages")
_write_errors = ErrorMapper(resource_name="Message", failure_message="Failed to create message")


@router.get("", response_model=MessagesEnvelope)
async def get_messages(
    broadcaster: MessageBroadcasterDep,
    settings: SettingsDep,
    limit: int | None = Query(default=None, ge=1, le=500, description="Max messages"),
) -> MessagesEnvelope:
    """Latest messages, newest first, each with its author."""
    try:
        messages = await broadcaster.recent_messages(limit or settings.messages_default_limit)
    except Exception as exc:
        _read_errors.raise_http(exc)
    return MessagesEnvelope(messages=messages)


@router.post("", response_model=MessageEnvelope)
async def create_message(payload: MessageCreate, broadcaster: MessageBroadcasterDep) -> MessageEnvelope:
    """Post a message. The author needs an active, unpaused stream (403 otherwise)."""
    try:
        message = await broadcaster.post_message(
            payload.user_id,
            payload.content,
            payload.message_type,
            payload.meta,
        )
    except Exception as exc:
        _write_errors.raise_http(exc)
    return MessageEnvelope(message=message)
