"""Database models for the community stream service.

The same SQLModel classes back both store implementations: the SQL store
persists them, the in-memory store keeps detached instances.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from community_stream.core.utils import utcnow


def _new_id() -> str:
    return str(uuid4())


class MessageType(str, Enum):
    """Kinds of chat entries."""

    USER = "user"
    SYSTEM = "system"
    ANNOUNCEMENT = "announcement"


class User(SQLModel, table=True):
    """Community member, identified by wallet address."""

    id: str = Field(default_factory=_new_id, primary_key=True)
    address: str = Field(unique=True, index=True)  # always lowercase
    username: str | None = None
    is_verified: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)


class Stream(SQLModel, table=True):
    """Metered payment pledge from a user to the community wallet."""

    id: str = Field(default_factory=_new_id, primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    community_address: str
    rate_per_second: Decimal = Field(max_digits=18, decimal_places=6)  # USDC/sec
    total_amount: Decimal = Field(max_digits=18, decimal_places=6)
    streamed_amount: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=6)
    start_time: datetime = Field(default_factory=utcnow)
    end_time: datetime | None = None
    is_active: bool = Field(default=True)
    is_paused: bool = Field(default=False)
    transaction_hash: str | None = None
    payment_id: str | None = None

    @property
    def is_streaming(self) -> bool:
        """True when the stream counts toward chat access."""
        return self.is_active and not self.is_paused


class Message(SQLModel, table=True):
    """Chat entry. Immutable once stored."""

    id: str = Field(default_factory=_new_id, primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    content: str
    message_type: MessageType = Field(default=MessageType.USER)
    # "metadata" is reserved on SQLModel classes; the column keeps the name.
    meta: dict[str, Any] | None = Field(default=None, sa_column=Column("metadata", JSON))
    created_at: datetime = Field(default_factory=utcnow, index=True)


class CommunityStats(SQLModel, table=True):
    """Singleton aggregate derived from users and streams."""

    __tablename__ = "community_stats"

    id: str = Field(default_factory=_new_id, primary_key=True)
    total_members: int = Field(default=0)
    active_streamers: int = Field(default=0)
    total_streamed: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=6)
    monthly_volume: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=6)
    updated_at: datetime = Field(default_factory=utcnow)
