"""User directory: wallet connect and profile updates."""
import asyncio
import logging
from typing import Any

from community_stream.core.utils import short_address
from community_stream.db.models import User
from community_stream.providers.signatures import SignatureVerifierABC
from community_stream.services.stats import CommunityStatsService
from community_stream.store import EntityStore

logger = logging.getLogger(__name__)


class UserService:
    """Finds or creates users by wallet address."""

    def __init__(
        self,
        store: EntityStore,
        stats: CommunityStatsService,
        verifier: SignatureVerifierABC,
    ) -> None:
        self._store = store
        self._stats = stats
        self._verifier = verifier
        self._connect_lock = asyncio.Lock()

    async def connect(self, address: str, signature: str, message: str) -> User:
        """Resolve a wallet connect to a user, creating it on first sight.

        New users get the shortened address as username and count toward
        total_members immediately.
        """
        wallet = await self._verifier.verify(address, signature, message)
        async with self._connect_lock:
            user = await self._store.get_user_by_address(wallet.address)
            if user is not None:
                return user
            user = await self._store.insert(
                User,
                {
                    "address": wallet.address,
                    "username": short_address(wallet.address),
                    "is_verified": wallet.is_verified,
                },
            )
        logger.info("New member %s (%s)", user.id, user.address)
        await self._stats.recompute()
        return user

    async def get_user(self, user_id: str) -> User | None:
        return await self._store.get(User, user_id)

    async def get_user_by_address(self, address: str) -> User | None:
        return await self._store.get_user_by_address(address)

    async def update_user(self, user_id: str, **changes: Any) -> User | None:
        """Partial update (e.g. username). None when user_id is unknown."""
        return await self._store.update(User, user_id, changes)
