"""Shared utilities: clock, amounts, addresses."""
from datetime import datetime, timedelta, timezone
from decimal import ROUND_DOWN, Decimal

AMOUNT_PLACES = Decimal("0.000001")
# Largest value a Numeric(18, 6) column holds.
MAX_AMOUNT = Decimal("999999999999.999999")


def utcnow() -> datetime:
    """Timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value is None:
        return None
    if value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_amount(value: Decimal | str | int | float | None) -> Decimal:
    """Parse an amount into a Decimal with 6 places; None counts as zero."""
    if value is None:
        return Decimal("0").quantize(AMOUNT_PLACES)
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(AMOUNT_PLACES, rounding=ROUND_DOWN)


def short_address(address: str) -> str:
    """Display label for a wallet address, e.g. 0x742d...E456."""
    return f"{address[:6]}...{address[-4:]}"


class MonotonicClock:
    """Strictly increasing UTC timestamps.

    Two inserts in the same microsecond still get distinct, ordered
    created_at values, so ordering by timestamp is a total order.
    """

    def __init__(self) -> None:
        self._last: datetime | None = None

    def now(self) -> datetime:
        current = utcnow()
        if self._last is not None and current <= self._last:
            current = self._last + timedelta(microseconds=1)
        self._last = current
        return current
