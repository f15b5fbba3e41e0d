"""Realtime chat channel over WebSocket."""
from fastapi import APIRouter, Query, WebSocket

from community_stream.deps import MessageBroadcasterWs, SessionRegistryWs
from community_stream.services.utils import handle_chat_session

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def chat_socket(
    websocket: WebSocket,
    registry: SessionRegistryWs,
    broadcaster: MessageBroadcasterWs,
    user_id: str | None = Query(default=None, alias="userId"),
) -> None:
    """Push channel for the community feed: /ws?userId=<id>.

    Client frames: {"type": "sendMessage", "content": "..."}.
    Server frames: {"type": "newMessage", "message": {...}}.
    """
    await handle_chat_session(websocket, user_id, registry, broadcaster)
