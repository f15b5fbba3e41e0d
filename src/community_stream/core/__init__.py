"""Core abstractions shared by services and routers."""
from community_stream.core.error_mapper import ErrorMapper
from community_stream.core.exceptions import (
    AccessDeniedError,
    CommunityError,
    InvalidAmountError,
    NotFoundError,
    PaymentError,
)
from community_stream.core.utils import (MAX_AMOUNT, MonotonicClock, as_utc,
                                         short_address, to_amount, utcnow)

__all__ = [
    "AccessDeniedError",
    "CommunityError",
    "ErrorMapper",
    "InvalidAmountError",
    "MAX_AMOUNT",
    "MonotonicClock",
    "NotFoundError",
    "PaymentError",
    "as_utc",
    "short_address",
    "to_amount",
    "utcnow",
]
