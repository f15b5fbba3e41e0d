"""Stream lifecycle and the community stats that follow it."""
from datetime import timedelta
from decimal import Decimal

import pytest

from community_stream.core.exceptions import (InvalidAmountError,
                                              NotFoundError, PaymentError)
from community_stream.db.models import Stream
from community_stream.providers.payments import PaymentStatus
from community_stream.services.streams import (SECONDS_PER_DAY,
                                               accrued_amount, stream_total)
from tests.conftest import BOB, COMMUNITY_WALLET


class TestCreateStream:
    """create_stream defaults and validation."""

    @pytest.mark.asyncio
    async def test_new_stream_is_active_unpaused_and_empty(self, streams, alice):
        stream = await streams.create_stream(alice.id, "0.0001", "100")

        assert stream.is_active is True
        assert stream.is_paused is False
        assert stream.streamed_amount == Decimal("0")
        assert stream.rate_per_second == Decimal("0.0001")
        assert stream.total_amount == Decimal("100")
        assert stream.community_address == COMMUNITY_WALLET
        assert stream.start_time is not None

    @pytest.mark.asyncio
    async def test_explicit_community_address_wins(self, streams, alice):
        stream = await streams.create_stream(alice.id, "1", "10", community_address="0xother")
        assert stream.community_address == "0xother"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rate,total", [("0", "10"), ("1", "0"), ("-1", "10")])
    async def test_non_positive_amounts_are_rejected(self, streams, alice, rate, total):
        with pytest.raises(InvalidAmountError):
            await streams.create_stream(alice.id, rate, total)

    @pytest.mark.asyncio
    async def test_amounts_beyond_column_width_are_rejected(self, streams, alice):
        with pytest.raises(InvalidAmountError):
            await streams.create_stream(alice.id, "1", "1000000000000")

    @pytest.mark.asyncio
    async def test_unknown_user_is_rejected(self, streams):
        with pytest.raises(NotFoundError) as exc_info:
            await streams.create_stream("ghost", "1", "10")
        assert exc_info.value.resource == "User"

    @pytest.mark.asyncio
    async def test_streams_of_lists_only_that_user(self, streams, users, alice):
        bob = await users.connect(BOB, "sig", "msg")
        await streams.create_stream(alice.id, "1", "10")
        await streams.create_stream(alice.id, "2", "20")
        await streams.create_stream(bob.id, "3", "30")

        assert len(await streams.streams_of(alice.id)) == 2
        assert len(await streams.streams_of(bob.id)) == 1
        assert await streams.streams_of("nobody") == []


class TestUpdateStream:
    """Pause/resume, progress and partial updates."""

    @pytest.mark.asyncio
    async def test_pause_and_resume_are_idempotent(self, streams, alice):
        stream = await streams.create_stream(alice.id, "1", "10")

        first = await streams.set_paused(stream.id, True)
        second = await streams.set_paused(stream.id, True)
        assert first.is_paused is True
        assert second.is_paused is True

        resumed = await streams.set_paused(stream.id, False)
        assert resumed.is_paused is False
        assert resumed.is_active is True

    @pytest.mark.asyncio
    async def test_unknown_stream_returns_none(self, streams):
        assert await streams.set_paused("missing", True) is None
        assert await streams.record_progress("missing", "1") is None
        assert await streams.accrue("missing") is None

    @pytest.mark.asyncio
    async def test_progress_may_go_down(self, streams, alice):
        stream = await streams.create_stream(alice.id, "1", "10")

        await streams.record_progress(stream.id, "5")
        lowered = await streams.record_progress(stream.id, "2.5")

        assert lowered.streamed_amount == Decimal("2.5")

    @pytest.mark.asyncio
    async def test_progress_is_bounded_by_total(self, streams, alice):
        stream = await streams.create_stream(alice.id, "1", "10")

        at_ceiling = await streams.record_progress(stream.id, "10")
        assert at_ceiling.streamed_amount == Decimal("10")

        with pytest.raises(InvalidAmountError):
            await streams.record_progress(stream.id, "10.000001")
        with pytest.raises(InvalidAmountError):
            await streams.record_progress(stream.id, "-1")

    @pytest.mark.asyncio
    async def test_unknown_fields_are_refused(self, streams, alice):
        stream = await streams.create_stream(alice.id, "1", "10")
        with pytest.raises(ValueError):
            await streams.update_stream(stream.id, user_id="someone-else")

    @pytest.mark.asyncio
    async def test_accrue_uses_elapsed_time_and_caps_at_total(self, streams, alice):
        stream = await streams.create_stream(alice.id, "0.5", "10")

        halfway = await streams.accrue(stream.id, now=stream.start_time + timedelta(seconds=4))
        assert halfway.streamed_amount == Decimal("2")

        capped = await streams.accrue(stream.id, now=stream.start_time + timedelta(hours=1))
        assert capped.streamed_amount == Decimal("10")

    @pytest.mark.asyncio
    async def test_accrue_leaves_paused_stream_alone(self, streams, alice):
        stream = await streams.create_stream(alice.id, "1", "100")
        await streams.set_paused(stream.id, True)

        result = await streams.accrue(stream.id, now=stream.start_time + timedelta(seconds=50))

        assert result.streamed_amount == Decimal("0")


class TestStats:
    """Stats are recomputed after every stream mutation."""

    @pytest.mark.asyncio
    async def test_stats_created_on_first_read(self, stats):
        row = await stats.get()
        again = await stats.get()

        assert row.id == again.id
        assert row.total_members == 0
        assert row.active_streamers == 0
        assert row.total_streamed == Decimal("0")

    @pytest.mark.asyncio
    async def test_members_follow_connects(self, stats, users, alice):
        await users.connect(alice.address.upper(), "sig", "msg")
        await users.connect(BOB, "sig", "msg")

        row = await stats.get()
        assert row.total_members == 2

    @pytest.mark.asyncio
    async def test_active_streamers_follow_pause_and_resume(self, stats, streams, users, alice):
        bob = await users.connect(BOB, "sig", "msg")
        first = await streams.create_stream(alice.id, "1", "10")
        await streams.create_stream(alice.id, "1", "10")
        bob_stream = await streams.create_stream(bob.id, "1", "10")

        assert (await stats.get()).active_streamers == 2

        await streams.set_paused(bob_stream.id, True)
        assert (await stats.get()).active_streamers == 1

        # Alice still has a second live stream.
        await streams.set_paused(first.id, True)
        assert (await stats.get()).active_streamers == 1

        await streams.set_paused(bob_stream.id, False)
        assert (await stats.get()).active_streamers == 2

    @pytest.mark.asyncio
    async def test_total_streamed_sums_all_streams(self, stats, streams, alice):
        one = await streams.create_stream(alice.id, "1", "10")
        two = await streams.create_stream(alice.id, "1", "10")
        await streams.record_progress(one.id, "3")
        await streams.record_progress(two.id, "4.5")
        await streams.set_paused(two.id, True)

        assert (await stats.get()).total_streamed == Decimal("7.5")

    @pytest.mark.asyncio
    async def test_monthly_volume_is_set_externally(self, stats):
        row = await stats.set_monthly_volume("1234.5")
        assert row.monthly_volume == Decimal("1234.5")


class TestPaymentBackedStreams:
    """start_stream pays first; sync_payment reacts to failures."""

    def test_stream_total(self):
        assert stream_total("0.0001", 1) == Decimal("8.64")
        assert stream_total(Decimal("1"), 0.5) == Decimal(SECONDS_PER_DAY // 2)

    @pytest.mark.asyncio
    async def test_start_stream_pays_total_to_community_wallet(self, streams, payments, alice):
        stream = await streams.start_stream(alice.id, "0.0001", 30)

        assert payments.payments == [(Decimal("259.2"), COMMUNITY_WALLET)]
        assert stream.total_amount == Decimal("259.2")
        assert stream.payment_id == "pay-1"
        assert stream.transaction_hash == "0xhash1"
        assert abs((stream.end_time - stream.start_time) - timedelta(days=30)) < timedelta(seconds=1)

    @pytest.mark.asyncio
    async def test_failed_payment_stores_nothing(self, streams, payments, store, alice):
        payments.fail_next = True

        with pytest.raises(PaymentError):
            await streams.start_stream(alice.id, "0.0001", 30)
        assert await store.find(Stream) == []

    @pytest.mark.asyncio
    async def test_total_beyond_amount_column_is_rejected_before_paying(
        self, streams, payments, store, alice
    ):
        with pytest.raises(InvalidAmountError):
            await streams.start_stream(alice.id, "999999999999", 365)
        assert payments.payments == []
        assert await store.find(Stream) == []

    @pytest.mark.asyncio
    async def test_start_stream_for_unknown_user_does_not_pay(self, streams, payments):
        with pytest.raises(NotFoundError):
            await streams.start_stream("ghost", "1", 1)
        assert payments.payments == []

    @pytest.mark.asyncio
    async def test_sync_payment_deactivates_on_failure(self, streams, payments, alice):
        stream = await streams.start_stream(alice.id, "0.0001", 1)

        still_pending = await streams.sync_payment(stream.id)
        assert still_pending.is_active is True

        payments.statuses[stream.payment_id] = PaymentStatus.FAILED
        failed = await streams.sync_payment(stream.id)
        assert failed.is_active is False

    @pytest.mark.asyncio
    async def test_sync_payment_without_payment_id(self, streams, alice):
        stream = await streams.create_stream(alice.id, "1", "10")
        with pytest.raises(PaymentError):
            await streams.sync_payment(stream.id)


def test_accrued_amount_never_lowers_recorded_progress():
    start = Stream(
        user_id="u",
        community_address="0xc",
        rate_per_second=Decimal("1"),
        total_amount=Decimal("100"),
        streamed_amount=Decimal("50"),
    )
    assert accrued_amount(start, now=start.start_time + timedelta(seconds=10)) == Decimal("50")
