"""Pydantic schemas for the HTTP and WebSocket wire format. Not persisted to DB.

Wire keys are camelCase; amounts are decimal strings.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel

from community_stream.db.models import MessageType

Amount = Decimal


class ApiModel(BaseModel):
    """Base for wire models: camelCase aliases, snake_case names accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_entity(cls, entity: SQLModel, **extra: Any):
        """Build from a stored entity plus extra fields (e.g. a joined user)."""
        return cls.model_validate({**entity.model_dump(), **extra})


# ---- Entities ----
class UserOut(ApiModel):
    """Public profile of a community member."""

    id: str
    address: str
    username: str | None = None
    is_verified: bool = False
    created_at: datetime


class StreamOut(ApiModel):
    id: str
    user_id: str
    community_address: str
    rate_per_second: Amount
    total_amount: Amount
    streamed_amount: Amount
    start_time: datetime
    end_time: datetime | None = None
    is_active: bool
    is_paused: bool
    transaction_hash: str | None = None
    payment_id: str | None = None


class MessageOut(ApiModel):
    """Chat message joined with its author's profile."""

    id: str
    user_id: str
    content: str
    message_type: MessageType
    meta: dict[str, Any] | None = Field(default=None, alias="metadata")
    created_at: datetime
    user: UserOut | None = None


class CommunityStatsOut(ApiModel):
    id: str
    total_members: int
    active_streamers: int
    total_streamed: Amount
    monthly_volume: Amount
    updated_at: datetime


# ---- Requests ----
class ConnectRequest(ApiModel):
    """Wallet connect: address plus a signed message."""

    address: str = Field(min_length=1)
    signature: str = Field(min_length=1)
    message: str = Field(min_length=1)


class StreamCreate(ApiModel):
    user_id: str = Field(min_length=1)
    community_address: str | None = None
    rate_per_second: Amount = Field(gt=0, max_digits=18, decimal_places=6)
    total_amount: Amount = Field(gt=0, max_digits=18, decimal_places=6)
    end_time: datetime | None = None
    payment_id: str | None = None
    transaction_hash: str | None = None


class StreamStart(ApiModel):
    """Start a stream by paying rate * duration up front."""

    user_id: str = Field(min_length=1)
    rate_per_second: Amount = Field(gt=0, max_digits=18, decimal_places=6)
    duration_days: float = Field(gt=0, le=365)


class StreamUpdate(ApiModel):
    """Partial stream update; unset fields are left alone."""

    is_paused: bool | None = None
    is_active: bool | None = None
    streamed_amount: Amount | None = Field(default=None, ge=0, max_digits=18, decimal_places=6)
    end_time: datetime | None = None
    transaction_hash: str | None = None
    payment_id: str | None = None


class MessageCreate(ApiModel):
    user_id: str = Field(min_length=1)
    content: str = Field(min_length=1)
    message_type: MessageType = MessageType.USER
    meta: dict[str, Any] | None = Field(default=None, alias="metadata")


# ---- Response envelopes ----
class UserEnvelope(ApiModel):
    user: UserOut


class StatsEnvelope(ApiModel):
    stats: CommunityStatsOut


class MessageEnvelope(ApiModel):
    message: MessageOut


class MessagesEnvelope(ApiModel):
    messages: list[MessageOut]


class StreamEnvelope(ApiModel):
    stream: StreamOut


class StreamsEnvelope(ApiModel):
    streams: list[StreamOut]


class AccessOut(ApiModel):
    """Proof-of-pay check for a user."""

    has_access: bool
    active_streams: list[StreamOut]


class ErrorOut(BaseModel):
    """Body of every non-2xx response."""

    error: str
    details: list[dict[str, Any]] | None = None


# ---- Realtime frames ----
class SendMessageFrame(ApiModel):
    """Client -> server: post a chat message."""

    type: Literal["sendMessage"]
    user_id: str | None = None
    content: str = Field(min_length=1)


class NewMessageFrame(ApiModel):
    """Server -> client: a message was stored."""

    type: Literal["newMessage"] = "newMessage"
    message: MessageOut


__all__ = [
    "AccessOut",
    "CommunityStatsOut",
    "ConnectRequest",
    "ErrorOut",
    "MessageCreate",
    "MessageEnvelope",
    "MessageOut",
    "MessagesEnvelope",
    "NewMessageFrame",
    "SendMessageFrame",
    "StatsEnvelope",
    "StreamCreate",
    "StreamEnvelope",
    "StreamOut",
    "StreamStart",
    "StreamUpdate",
    "StreamsEnvelope",
    "UserEnvelope",
    "UserOut",
]
