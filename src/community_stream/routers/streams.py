"""Payment stream routes."""
import logging

from fastapi import APIRouter, HTTPException

from community_stream.core import ErrorMapper
from community_stream.db.models import Stream
from community_stream.deps import StreamServiceDep
from community_stream.routers.params import require_id
from community_stream.schemas import (StreamCreate, StreamEnvelope, StreamOut,
                                      StreamsEnvelope, StreamStart,
                                      StreamUpdate)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/streams", tags=["streams"])

_create_errors = ErrorMapper(resource_name="Stream", failure_message="Failed to create stream")
_update_errors = ErrorMapper(resource_name="Stream", failure_message="Failed to update stream")
_read_errors = ErrorMapper(resource_name="Stream", failure_message="Failed to get streams")


def _envelope(stream: Stream | None) -> StreamEnvelope:
    if stream is None:
        raise HTTPException(status_code=404, detail="Stream not found")
    return StreamEnvelope(stream=StreamOut.from_entity(stream))


@router.post("", response_model=StreamEnvelope)
async def create_stream(payload: StreamCreate, streams: StreamServiceDep) -> StreamEnvelope:
    """Record a stream whose payment the client already initiated."""
    try:
        stream = await streams.create_stream(
            payload.user_id,
            payload.rate_per_second,
            payload.total_amount,
            community_address=payload.community_address,
            end_time=payload.end_time,
            payment_id=payload.payment_id,
            transaction_hash=payload.transaction_hash,
        )
    except Exception as exc:
        _create_errors.raise_http(exc)
    return _envelope(stream)


@router.post("/start", response_model=StreamEnvelope)
async def start_stream(payload: StreamStart, streams: StreamServiceDep) -> StreamEnvelope:
    """Pay rate * duration to the community wallet and open the stream (502 if payment fails)."""
    try:
        stream = await streams.start_stream(
            payload.user_id, payload.rate_per_second, payload.duration_days
        )
    except Exception as exc:
        _create_errors.raise_http(exc)
    return _envelope(stream)


@router.get("/user/{user_id}", response_model=StreamsEnvelope)
async def get_user_streams(user_id: str, streams: StreamServiceDep) -> StreamsEnvelope:
    """All streams of a user, active or not."""
    user_id = require_id(user_id, "user ID")
    try:
        found = await streams.streams_of(user_id)
    except Exception as exc:
        _read_errors.raise_http(exc)
    return StreamsEnvelope(streams=[StreamOut.from_entity(s) for s in found])


@router.patch("/{stream_id}", response_model=StreamEnvelope)
async def update_stream(
    stream_id: str, payload: StreamUpdate, streams: StreamServiceDep
) -> StreamEnvelope:
    """Partial update: pause/resume, progress, end time, payment references."""
    stream_id = require_id(stream_id, "stream ID")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    try:
        stream = await streams.update_stream(stream_id, **changes)
    except Exception as exc:
        _update_errors.raise_http(exc)
    return _envelope(stream)


@router.post("/{stream_id}/accrue", response_model=StreamEnvelope)
async def accrue_stream(stream_id: str, streams: StreamServiceDep) -> StreamEnvelope:
    """Set streamedAmount from rate and elapsed time, capped at totalAmount."""
    stream_id = require_id(stream_id, "stream ID")
    try:
        stream = await streams.accrue(stream_id)
    except Exception as exc:
        _update_errors.raise_http(exc)
    return _envelope(stream)


@router.post("/{stream_id}/sync-payment", response_model=StreamEnvelope)
async def sync_stream_payment(stream_id: str, streams: StreamServiceDep) -> StreamEnvelope:
    """Check the stream's payment; a failed payment deactivates the stream."""
    stream_id = require_id(stream_id, "stream ID")
    try:
        stream = await streams.sync_payment(stream_id)
    except Exception as exc:
        _update_errors.raise_http(exc)
    return _envelope(stream)
