"""Helpers for serving realtime sessions."""
from community_stream.services.utils.session_handler import (
    handle_chat_session,
    handle_client_frame,
)

__all__ = ["handle_chat_session", "handle_client_frame"]
