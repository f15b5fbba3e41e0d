"""Proof-of-pay access check."""
from fastapi import APIRouter

from community_stream.core import ErrorMapper
from community_stream.deps import AccessEvaluatorDep
from community_stream.routers.params import require_id
from community_stream.schemas import AccessOut, StreamOut

router = APIRouter(prefix="/api/verify-access", tags=["access"])

_errors = ErrorMapper(resource_name="User", failure_message="Failed to verify access")


@router.get("/{user_id}", response_model=AccessOut)
async def verify_access(user_id: str, access: AccessEvaluatorDep) -> AccessOut:
    """Whether user_id may chat, with the streams that grant it."""
    user_id = require_id(user_id, "user ID")
    try:
        active = await access.active_streams_of(user_id)
    except Exception as exc:
        _errors.raise_http(exc)
    return AccessOut(
        has_access=bool(active),
        active_streams=[StreamOut.from_entity(s) for s in active],
    )
