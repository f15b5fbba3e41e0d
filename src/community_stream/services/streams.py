"""Stream lifecycle: create, pause/resume, progress, payment-backed start.

Every mutation ends with a stats recompute, so active_streamers and
total_streamed follow the stream set. The recompute is not atomic with the
write; a concurrent stats read may see the previous aggregate.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from community_stream.core.exceptions import (InvalidAmountError,
                                              NotFoundError, PaymentError)
from community_stream.core.utils import MAX_AMOUNT, as_utc, to_amount, utcnow
from community_stream.db.models import Stream, User
from community_stream.providers.payments import (PaymentGatewayABC,
                                                 PaymentStatus)
from community_stream.services.stats import CommunityStatsService
from community_stream.store import EntityStore

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

# Fields a caller may change through update_stream().
UPDATABLE_FIELDS = frozenset(
    {"is_paused", "is_active", "streamed_amount", "end_time", "transaction_hash", "payment_id"}
)


def stream_total(rate_per_second: Decimal | str, duration_days: float) -> Decimal:
    """Committed ceiling for a stream paying rate for duration_days."""
    seconds = Decimal(str(duration_days)) * SECONDS_PER_DAY
    return to_amount(to_amount(rate_per_second) * seconds)


def accrued_amount(stream: Stream, now: datetime | None = None) -> Decimal:
    """min(total, rate * seconds since start); never below what is recorded."""
    now = as_utc(now) or utcnow()
    elapsed = Decimal(str(max((now - as_utc(stream.start_time)).total_seconds(), 0.0)))
    earned = min(to_amount(stream.total_amount), to_amount(stream.rate_per_second) * elapsed)
    return to_amount(max(earned, to_amount(stream.streamed_amount)))


class StreamService:
    """Creates and mutates streams and keeps community stats in step."""

    def __init__(
        self,
        store: EntityStore,
        stats: CommunityStatsService,
        payments: PaymentGatewayABC,
        *,
        community_address: str,
    ) -> None:
        self._store = store
        self._stats = stats
        self._payments = payments
        self._community_address = community_address

    @property
    def community_address(self) -> str:
        return self._community_address

    async def get_stream(self, stream_id: str) -> Stream | None:
        return await self._store.get(Stream, stream_id)

    async def streams_of(self, user_id: str) -> list[Stream]:
        return await self._store.find(Stream, lambda s: s.user_id == user_id)

    async def create_stream(
        self,
        user_id: str,
        rate_per_second: Decimal | str,
        total_amount: Decimal | str,
        *,
        community_address: str | None = None,
        end_time: datetime | None = None,
        payment_id: str | None = None,
        transaction_hash: str | None = None,
    ) -> Stream:
        """Open an active, unpaused stream with nothing streamed yet.

        Raises:
            InvalidAmountError: rate or total is not positive, or does not fit
                an amount column.
            NotFoundError: user_id does not reference a user.
        """
        rate = to_amount(rate_per_second)
        total = to_amount(total_amount)
        if rate <= 0 or total <= 0:
            raise InvalidAmountError("ratePerSecond and totalAmount must be positive")
        if rate > MAX_AMOUNT or total > MAX_AMOUNT:
            raise InvalidAmountError(f"Amounts cannot exceed {MAX_AMOUNT}")
        if await self._store.get(User, user_id) is None:
            raise NotFoundError("User", user_id)

        stream = await self._store.insert(
            Stream,
            {
                "user_id": user_id,
                "community_address": community_address or self._community_address,
                "rate_per_second": rate,
                "total_amount": total,
                "streamed_amount": to_amount(0),
                "start_time": utcnow(),
                "end_time": as_utc(end_time),
                "is_active": True,
                "is_paused": False,
                "payment_id": payment_id,
                "transaction_hash": transaction_hash,
            },
        )
        logger.info("Stream %s opened by %s at %s/s (total %s)", stream.id, user_id, rate, total)
        await self._stats.recompute()
        return stream

    async def update_stream(self, stream_id: str, **changes: Any) -> Stream | None:
        """Apply a partial update. None when stream_id is unknown.

        Raises:
            InvalidAmountError: streamed_amount is negative or above total_amount.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update stream fields: {', '.join(sorted(unknown))}")
        stream = await self._store.get(Stream, stream_id)
        if stream is None:
            return None
        if "streamed_amount" in changes:
            amount = to_amount(changes["streamed_amount"])
            if amount < 0:
                raise InvalidAmountError("streamedAmount cannot be negative")
            if amount > to_amount(stream.total_amount):
                raise InvalidAmountError("streamedAmount cannot exceed totalAmount")
            changes["streamed_amount"] = amount
        if "end_time" in changes:
            changes["end_time"] = as_utc(changes["end_time"])
        updated = await self._store.update(Stream, stream_id, changes)
        if updated is None:
            return None
        await self._stats.recompute()
        return updated

    async def set_paused(self, stream_id: str, paused: bool) -> Stream | None:
        """Pause or resume. Idempotent; None when stream_id is unknown."""
        stream = await self.update_stream(stream_id, is_paused=paused)
        if stream is not None:
            logger.info("Stream %s %s", stream_id, "paused" if paused else "resumed")
        return stream

    async def record_progress(self, stream_id: str, streamed_amount: Decimal | str) -> Stream | None:
        """Set streamed_amount to a caller-supplied value.

        The value is trusted as long as it lies in [0, total_amount]; it may
        go down. accrue() derives the amount from elapsed time instead.
        """
        return await self.update_stream(stream_id, streamed_amount=streamed_amount)

    async def accrue(self, stream_id: str, now: datetime | None = None) -> Stream | None:
        """Record progress computed from rate and elapsed time.

        Paused or inactive streams keep their current amount.
        """
        stream = await self._store.get(Stream, stream_id)
        if stream is None:
            return None
        if not stream.is_streaming:
            return stream
        return await self.record_progress(stream_id, accrued_amount(stream, now))

    async def start_stream(
        self,
        user_id: str,
        rate_per_second: Decimal | str,
        duration_days: float,
    ) -> Stream:
        """Pay rate * duration to the community wallet, then open the stream.

        Nothing is stored when the payment fails.

        Raises:
            PaymentError: the payment network rejected the payment.
            NotFoundError: user_id does not reference a user.
            InvalidAmountError: the total is not positive or does not fit an
                amount column; no payment is attempted.
        """
        if await self._store.get(User, user_id) is None:
            raise NotFoundError("User", user_id)
        rate = to_amount(rate_per_second)
        total = stream_total(rate, duration_days)
        if rate <= 0 or total <= 0:
            raise InvalidAmountError("ratePerSecond and durationDays must be positive")
        if total > MAX_AMOUNT:
            raise InvalidAmountError(f"Stream total {total} exceeds the maximum of {MAX_AMOUNT}")
        result = await self._payments.initiate_payment(total, self._community_address)
        return await self.create_stream(
            user_id,
            rate,
            total,
            end_time=utcnow() + timedelta(days=duration_days),
            payment_id=result.payment_id,
            transaction_hash=result.transaction_hash,
        )

    async def sync_payment(self, stream_id: str) -> Stream | None:
        """Deactivate the stream if its payment failed. None for unknown id.

        Raises:
            PaymentError: the stream carries no payment id.
        """
        stream = await self._store.get(Stream, stream_id)
        if stream is None:
            return None
        if not stream.payment_id:
            raise PaymentError("Stream has no payment to check")
        status = await self._payments.check_status(stream.payment_id)
        if status == PaymentStatus.FAILED and stream.is_active:
            logger.warning("Payment %s failed; deactivating stream %s", stream.payment_id, stream_id)
            return await self.update_stream(stream_id, is_active=False)
        return stream
