"""Wallet connect route."""
import logging

from fastapi import APIRouter

from community_stream.core import ErrorMapper
from community_stream.deps import UserServiceDep
from community_stream.schemas import ConnectRequest, UserEnvelope, UserOut

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])

_errors = ErrorMapper(resource_name="User", failure_message="Authentication failed")


@router.post("/connect", response_model=UserEnvelope)
async def connect_wallet(payload: ConnectRequest, users: UserServiceDep) -> UserEnvelope:
    """Connect a wallet and return its user, creating it on first connect.

    The signature is handed to the configured verifier; the default verifier
    trusts the address and leaves the user unverified.
    """
    try:
        user = await users.connect(payload.address, payload.signature, payload.message)
    except Exception as exc:
        _errors.raise_http(exc)
    return UserEnvelope(user=UserOut.from_entity(user))
