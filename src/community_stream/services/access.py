"""Access decision derived from a user's streams."""
from community_stream.db.models import Stream
from community_stream.store import EntityStore


class AccessEvaluator:
    """Proof-of-pay: a user may chat while any stream is active and unpaused.

    Reads current stream state on every call; nothing is cached.
    """

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    async def active_streams_of(self, user_id: str) -> list[Stream]:
        """Streams of user_id that count toward access."""
        return await self._store.find(
            Stream, lambda s: s.user_id == user_id and s.is_streaming
        )

    async def has_access(self, user_id: str) -> bool:
        return bool(await self.active_streams_of(user_id))
