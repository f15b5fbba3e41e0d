"""API routers.

Includes routes for:
- /api/auth - wallet connect
- /api/community - community statistics
- /api/messages - community feed (poll and post)
- /api/streams - payment stream lifecycle
- /api/verify-access - proof-of-pay check
- /ws - realtime feed (WebSocket)
"""
from community_stream.routers.access import router as access_router
from community_stream.routers.auth import router as auth_router
from community_stream.routers.community import router as community_router
from community_stream.routers.messages import router as messages_router
from community_stream.routers.realtime import router as realtime_router
from community_stream.routers.streams import router as streams_router

__all__ = [
    "access_router",
    "auth_router",
    "community_router",
    "messages_router",
    "realtime_router",
    "streams_router",
]
