"""SQL entity store backed by SQLModel sessions."""
import asyncio
from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy.engine import Engine
from sqlmodel import select

from community_stream.db.models import User
from community_stream.db.sessions import get_session, init_db
from community_stream.store.base import EntityStore, EntityT


class SqlStore(EntityStore):
    """Entity store over a synchronous SQLAlchemy engine.

    Session work is blocking, so each operation runs in a worker thread and
    the event loop stays free. Sessions do not expire on commit, so returned
    entities remain readable after the session closes.

    SQLite connections may be shared between worker threads (in-memory
    databases use a single one), so SQLite work runs one operation at a time.
    """

    def __init__(self, engine: Engine) -> None:
        super().__init__()
        self._engine = engine
        self._sqlite_lock = asyncio.Lock() if engine.dialect.name == "sqlite" else None

    @property
    def engine(self) -> Engine:
        return self._engine

    async def _run(self, work: Callable[[], Any]) -> Any:
        if self._sqlite_lock is None:
            return await asyncio.to_thread(work)
        async with self._sqlite_lock:
            return await asyncio.to_thread(work)

    async def init(self) -> None:
        await self._run(lambda: init_db(self._engine))

    async def close(self) -> None:
        await asyncio.to_thread(self._engine.dispose)

    async def get(self, kind: type[EntityT], entity_id: str) -> EntityT | None:
        def _get() -> EntityT | None:
            with get_session(self._engine) as session:
                return session.get(kind, entity_id)

        return await self._run(_get)

    async def find(
        self,
        kind: type[EntityT],
        predicate: Callable[[EntityT], bool] | None = None,
    ) -> list[EntityT]:
        def _scan() -> list[EntityT]:
            with get_session(self._engine) as session:
                return list(session.exec(select(kind)).all())

        entities = await self._run(_scan)
        if predicate is None:
            return entities
        return [e for e in entities if predicate(e)]

    async def insert(self, kind: type[EntityT], fields: Mapping[str, Any]) -> EntityT:
        entity = kind(**self._prepare_insert(kind, fields))

        def _insert() -> EntityT:
            with get_session(self._engine) as session:
                session.add(entity)
                session.flush()
                session.refresh(entity)
                return entity

        return await self._run(_insert)

    async def update(
        self, kind: type[EntityT], entity_id: str, changes: Mapping[str, Any]
    ) -> EntityT | None:
        data = self._prepare_update(kind, changes)

        def _update() -> EntityT | None:
            with get_session(self._engine) as session:
                entity = session.get(kind, entity_id)
                if entity is None:
                    return None
                for name, value in data.items():
                    setattr(entity, name, value)
                session.add(entity)
                session.flush()
                session.refresh(entity)
                return entity

        return await self._run(_update)

    async def latest(self, kind: type[EntityT], limit: int) -> list[EntityT]:
        def _latest() -> list[EntityT]:
            with get_session(self._engine) as session:
                statement = select(kind).order_by(kind.created_at.desc()).limit(limit)
                return list(session.exec(statement).all())

        return await self._run(_latest)

    async def get_user_by_address(self, address: str) -> User | None:
        def _lookup() -> User | None:
            with get_session(self._engine) as session:
                statement = select(User).where(User.address == address.lower())
                return session.exec(statement).first()

        return await self._run(_lookup)
