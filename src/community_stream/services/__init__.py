"""Service layer: stream lifecycle, access decisions, feed and members."""
from community_stream.services.access import AccessEvaluator
from community_stream.services.messages import MessageBroadcaster
from community_stream.services.stats import CommunityStatsService
from community_stream.services.streams import StreamService
from community_stream.services.users import UserService

__all__ = [
    "AccessEvaluator",
    "CommunityStatsService",
    "MessageBroadcaster",
    "StreamService",
    "UserService",
]
