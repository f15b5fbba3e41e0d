"""Realtime sessions: the per-user connection registry."""
from community_stream.realtime.registry import Session, SessionRegistry, WebSocketSession

__all__ = ["Session", "SessionRegistry", "WebSocketSession"]
