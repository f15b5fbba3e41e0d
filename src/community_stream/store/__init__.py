"""Entity stores: in-memory and SQL implementations of EntityStore."""
from community_stream.config import Settings
from community_stream.db.sessions import create_db_engine
from community_stream.store.base import EntityStore
from community_stream.store.memory import MemoryStore
from community_stream.store.sql import SqlStore


def create_store(settings: Settings) -> EntityStore:
    """Pick the backend: SQL when DATABASE_URL is set, memory otherwise."""
    if settings.database_url:
        return SqlStore(create_db_engine(settings.database_url, echo=settings.sql_echo))
    return MemoryStore()


__all__ = ["EntityStore", "MemoryStore", "SqlStore", "create_store"]
