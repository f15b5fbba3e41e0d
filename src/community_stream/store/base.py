"""Abstract base class for entity stores."""
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, TypeVar
from uuid import uuid4

from sqlmodel import SQLModel

from community_stream.core.utils import MonotonicClock
from community_stream.db.models import User

EntityT = TypeVar("EntityT", bound=SQLModel)


class EntityStore(ABC):
    """CRUD persistence for User, Stream, Message and CommunityStats.

    Every operation takes the entity kind (the model class) as its first
    argument. Entities handed out are detached copies; changing one has no
    effect until it goes through update(). There is no delete.

    Subclasses must call super().__init__() so inserts share the store clock.
    """

    def __init__(self) -> None:
        self._clock = MonotonicClock()

    @abstractmethod
    async def get(self, kind: type[EntityT], entity_id: str) -> EntityT | None:
        """Fetch one entity by id, or None."""

    @abstractmethod
    async def find(
        self,
        kind: type[EntityT],
        predicate: Callable[[EntityT], bool] | None = None,
    ) -> list[EntityT]:
        """Return all entities of a kind matching predicate (all when None).

        Results come back in insertion order.
        """

    @abstractmethod
    async def insert(self, kind: type[EntityT], fields: Mapping[str, Any]) -> EntityT:
        """Insert a new entity; the store assigns id and created_at."""

    @abstractmethod
    async def update(
        self, kind: type[EntityT], entity_id: str, changes: Mapping[str, Any]
    ) -> EntityT | None:
        """Merge changes into an existing entity. None when id is absent."""

    @abstractmethod
    async def latest(self, kind: type[EntityT], limit: int) -> list[EntityT]:
        """Return up to limit entities, newest created_at first."""

    async def get_user_by_address(self, address: str) -> User | None:
        """Case-insensitive wallet address lookup."""
        needle = address.lower()
        users = await self.find(User, lambda u: u.address == needle)
        return users[0] if users else None

    def _prepare_insert(self, kind: type[SQLModel], fields: Mapping[str, Any]) -> dict[str, Any]:
        """Assign server-side fields and normalize addresses."""
        data = dict(fields)
        data["id"] = str(uuid4())
        if "created_at" in kind.model_fields:
            data["created_at"] = self._clock.now()
        if kind is User:
            data["address"] = data["address"].lower()
        return data

    @staticmethod
    def _prepare_update(kind: type[SQLModel], changes: Mapping[str, Any]) -> dict[str, Any]:
        """Drop fields the caller may not change (id, unknown names)."""
        data = {k: v for k, v in changes.items() if k in kind.model_fields and k != "id"}
        if kind is User and "address" in data:
            data["address"] = data["address"].lower()
        return data

    async def init(self) -> None:
        """Prepare backing storage. Override if setup is needed."""

    async def close(self) -> None:
        """Release resources. Override if cleanup is needed."""

    async def __aenter__(self) -> "EntityStore":
        """Async context manager entry."""
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
