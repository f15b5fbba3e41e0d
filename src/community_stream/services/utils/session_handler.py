"""WebSocket chat session: register, read client frames, unregister."""
import json
import logging

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from community_stream.core.exceptions import AccessDeniedError
from community_stream.realtime import SessionRegistry, WebSocketSession
from community_stream.schemas import SendMessageFrame
from community_stream.services.messages import MessageBroadcaster

logger = logging.getLogger(__name__)


async def handle_chat_session(
    websocket: WebSocket,
    user_id: str | None,
    registry: SessionRegistry,
    broadcaster: MessageBroadcaster,
) -> None:
    """Accept WebSocket, register it for user_id, then serve sendMessage frames.

    The session is registered for its whole lifetime and removed on
    disconnect or error. A newer connection for the same user replaces this
    one in the registry; this one keeps reading until its client goes away.
    """
    await websocket.accept()
    if not user_id:
        await websocket.close(code=4000, reason="Query param 'userId' required (e.g. /ws?userId=...)")
        return
    session = WebSocketSession(websocket)
    registry.register(user_id, session)
    logger.info("Chat session opened for %s (%d connected)", user_id, len(registry))
    try:
        while True:
            raw = await websocket.receive_text()
            await handle_client_frame(raw, user_id, broadcaster)
    except WebSocketDisconnect:
        logger.debug("Chat client %s disconnected", user_id)
    except Exception as exc:
        logger.exception("Chat session error for %s: %s", user_id, exc)
        try:
            await websocket.close(code=1011, reason="Session error")
        except Exception:
            pass
    finally:
        registry.unregister(user_id, session)
        logger.info("Chat session closed for %s (%d connected)", user_id, len(registry))


async def handle_client_frame(raw: str, user_id: str, broadcaster: MessageBroadcaster) -> None:
    """Handle one client frame. Malformed, unknown, refused or failed frames are dropped.

    No error frame goes back to the client; the connection stays open.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug("Ignoring malformed frame from %s", user_id)
        return
    if not isinstance(data, dict) or data.get("type") != "sendMessage":
        logger.debug("Ignoring unknown frame from %s", user_id)
        return
    try:
        frame = SendMessageFrame.model_validate(data)
    except ValidationError:
        logger.debug("Ignoring invalid sendMessage frame from %s", user_id)
        return
    if frame.user_id and frame.user_id != user_id:
        logger.warning("Session %s tried to post as %s; dropped", user_id, frame.user_id)
        return
    try:
        await broadcaster.post_message(user_id, frame.content)
    except AccessDeniedError:
        logger.info("Dropped message from %s: no active stream", user_id)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Failed to post message from %s: %s", user_id, exc)
