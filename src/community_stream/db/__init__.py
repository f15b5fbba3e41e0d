"""Database package: models and session management."""
from community_stream.db.models import CommunityStats, Message, MessageType, Stream, User

__all__ = ["CommunityStats", "Message", "MessageType", "Stream", "User"]
