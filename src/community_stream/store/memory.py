"""In-memory entity store for single-process deployments and tests."""
import copy
from collections.abc import Callable, Mapping
from typing import Any

from sqlmodel import SQLModel

from community_stream.store.base import EntityStore, EntityT


class MemoryStore(EntityStore):
    """Keeps entities as plain field dicts, keyed by kind then id.

    Dicts preserve insertion order, which find() and latest() rely on.
    """

    def __init__(self) -> None:
        super().__init__()
        self._tables: dict[type[SQLModel], dict[str, dict[str, Any]]] = {}

    def _table(self, kind: type[SQLModel]) -> dict[str, dict[str, Any]]:
        return self._tables.setdefault(kind, {})

    @staticmethod
    def _build(kind: type[EntityT], row: dict[str, Any]) -> EntityT:
        return kind(**copy.deepcopy(row))

    async def get(self, kind: type[EntityT], entity_id: str) -> EntityT | None:
        row = self._table(kind).get(entity_id)
        return self._build(kind, row) if row is not None else None

    async def find(
        self,
        kind: type[EntityT],
        predicate: Callable[[EntityT], bool] | None = None,
    ) -> list[EntityT]:
        entities = [self._build(kind, row) for row in self._table(kind).values()]
        if predicate is None:
            return entities
        return [e for e in entities if predicate(e)]

    async def insert(self, kind: type[EntityT], fields: Mapping[str, Any]) -> EntityT:
        entity = kind(**self._prepare_insert(kind, fields))
        self._table(kind)[entity.id] = entity.model_dump()
        return self._build(kind, self._table(kind)[entity.id])

    async def update(
        self, kind: type[EntityT], entity_id: str, changes: Mapping[str, Any]
    ) -> EntityT | None:
        table = self._table(kind)
        if entity_id not in table:
            return None
        table[entity_id] = {**table[entity_id], **copy.deepcopy(self._prepare_update(kind, changes))}
        return self._build(kind, table[entity_id])

    async def latest(self, kind: type[EntityT], limit: int) -> list[EntityT]:
        rows = list(self._table(kind).values())
        rows.reverse()
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [self._build(kind, row) for row in rows[:limit]]
