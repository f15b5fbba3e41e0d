"""Community statistics: lazily created singleton, recomputed from scratch."""
import asyncio
import logging
from decimal import Decimal

from community_stream.core.utils import to_amount, utcnow
from community_stream.db.models import CommunityStats, Stream, User
from community_stream.store import EntityStore

logger = logging.getLogger(__name__)


class CommunityStatsService:
    """Owns the CommunityStats row.

    total_members, active_streamers and total_streamed are derived from the
    store on every recompute(); monthly_volume is supplied from outside.
    The lock serializes get-or-create and recompute so only one row exists.
    """

    def __init__(self, store: EntityStore) -> None:
        self._store = store
        self._lock = asyncio.Lock()

    async def get(self) -> CommunityStats:
        """Return the stats row, creating it on first read."""
        async with self._lock:
            return await self._get_or_create()

    async def recompute(self) -> CommunityStats:
        """Recompute the derived aggregates and persist them."""
        async with self._lock:
            stats = await self._get_or_create()
            users = await self._store.find(User)
            streams = await self._store.find(Stream)
            active_streamers = len({s.user_id for s in streams if s.is_streaming})
            total_streamed = sum((to_amount(s.streamed_amount) for s in streams), Decimal("0"))
            updated = await self._store.update(
                CommunityStats,
                stats.id,
                {
                    "total_members": len(users),
                    "active_streamers": active_streamers,
                    "total_streamed": to_amount(total_streamed),
                    "updated_at": utcnow(),
                },
            )
            logger.debug(
                "Stats recomputed: members=%d active=%d streamed=%s",
                len(users), active_streamers, total_streamed,
            )
            return updated

    async def set_monthly_volume(self, volume: Decimal | str) -> CommunityStats:
        """Record the externally derived monthly volume."""
        async with self._lock:
            stats = await self._get_or_create()
            return await self._store.update(
                CommunityStats,
                stats.id,
                {"monthly_volume": to_amount(volume), "updated_at": utcnow()},
            )

    async def _get_or_create(self) -> CommunityStats:
        rows = await self._store.find(CommunityStats)
        if rows:
            return rows[0]
        return await self._store.insert(
            CommunityStats,
            {
                "total_members": 0,
                "active_streamers": 0,
                "total_streamed": to_amount(0),
                "monthly_volume": to_amount(0),
                "updated_at": utcnow(),
            },
        )
