"""Tests for the slot availability calculator."""

from datetime import date

import pytest

from tourbooking.models import BookingStatus
from tourbooking.services.availability import AvailabilityCalculator, summarize
from tests.mocks.models import (
    FRIDAY,
    KAYAK_ID,
    MONDAY,
    NEXT_MONDAY,
    SURFING_ID,
    TUESDAY,
    make_booking,
)


@pytest.fixture()
def calculator(repo) -> AvailabilityCalculator:
    return AvailabilityCalculator(repo)


class TestAvailabilityForDate:
    @pytest.mark.asyncio
    async def test_load_is_participant_sum(self, repo, calculator):
        await repo.create_booking(make_booking(participants=1))
        slots = await calculator.availability_for_date(SURFING_ID, MONDAY)
        morning = slots[0]
        assert morning.slot_id == "surf-mon-am"
        assert morning.current_bookings == 5
        assert morning.max_capacity == 6
        assert morning.remaining_capacity == 1
        assert morning.is_available is True

    @pytest.mark.asyncio
    async def test_disabled_slot_reported_unavailable(self, calculator):
        slots = await calculator.availability_for_date(SURFING_ID, MONDAY)
        afternoon = slots[1]
        assert afternoon.slot_id == "surf-mon-pm"
        assert afternoon.max_capacity == 10
        assert afternoon.remaining_capacity == 10
        assert afternoon.is_available is False

    @pytest.mark.asyncio
    async def test_no_schedule_returns_empty(self, calculator):
        assert await calculator.availability_for_date(SURFING_ID, TUESDAY) == []

    @pytest.mark.asyncio
    async def test_unknown_activity_returns_empty(self, calculator):
        assert await calculator.availability_for_date("no-such-activity", MONDAY) == []

    @pytest.mark.asyncio
    async def test_full_slot_still_listed(self, repo, calculator):
        await repo.create_booking(make_booking(participants=2), status=BookingStatus.CONFIRMED)
        slots = await calculator.availability_for_date(SURFING_ID, MONDAY)
        assert slots[0].remaining_capacity == 0
        assert slots[0].is_available is False

    @pytest.mark.asyncio
    async def test_overbooked_remaining_never_negative(self, repo, calculator):
        await repo.create_booking(make_booking(participants=5), status=BookingStatus.CONFIRMED)
        slots = await calculator.availability_for_date(SURFING_ID, MONDAY)
        assert slots[0].current_bookings == 9
        assert slots[0].remaining_capacity == 0

    @pytest.mark.asyncio
    async def test_cancellation_frees_capacity(self, repo, calculator):
        filler = await repo.create_booking(
            make_booking(participants=2), status=BookingStatus.CONFIRMED
        )
        assert (await calculator.availability_for_date(SURFING_ID, MONDAY))[0].remaining_capacity == 0

        await repo.update_booking(filler.id, {"status": BookingStatus.CANCELLED})
        slots = await calculator.availability_for_date(SURFING_ID, MONDAY)
        assert slots[0].remaining_capacity > 0

    @pytest.mark.asyncio
    async def test_bookings_on_other_dates_do_not_count(self, calculator):
        slots = await calculator.availability_for_date(SURFING_ID, NEXT_MONDAY)
        assert slots[0].current_bookings == 0

    @pytest.mark.asyncio
    async def test_available_slots_filter(self, calculator):
        slots = await calculator.available_slots_for_date(SURFING_ID, MONDAY, min_participants=2)
        assert [s.slot_id for s in slots] == ["surf-mon-am"]
        assert await calculator.available_slots_for_date(SURFING_ID, MONDAY, min_participants=3) == []


class TestSummarize:
    @pytest.mark.asyncio
    async def test_summary_counts(self, calculator):
        summary = summarize(await calculator.availability_for_date(SURFING_ID, MONDAY))
        assert summary.total_slots == 2
        assert summary.available_slots == 1
        assert summary.fully_booked_slots == 0
        assert summary.total_capacity == 16
        assert summary.total_bookings == 4

    def test_empty(self):
        summary = summarize([])
        assert summary.total_slots == 0
        assert summary.total_capacity == 0


class TestUtilization:
    @pytest.mark.asyncio
    async def test_single_day(self, calculator):
        stats = await calculator.utilization(SURFING_ID, MONDAY, MONDAY)
        assert stats.total_slots == 2
        assert stats.booked_slots == 1
        assert stats.utilization_rate == 50.0
        assert stats.average_capacity_used == 25.0

    @pytest.mark.asyncio
    async def test_range_counts_each_scheduled_day(self, calculator):
        # Mon 2 slots, Fri 1 slot, next Mon 2 slots.
        stats = await calculator.utilization(SURFING_ID, MONDAY, NEXT_MONDAY)
        assert stats.total_slots == 5
        assert stats.booked_slots == 1
        assert stats.utilization_rate == 20.0
        assert stats.average_capacity_used == round(4 / 38 * 100, 2)

    @pytest.mark.asyncio
    async def test_no_slots(self, calculator):
        stats = await calculator.utilization(KAYAK_ID, TUESDAY, TUESDAY)
        assert stats.total_slots == 0
        assert stats.utilization_rate == 0.0
        assert stats.average_capacity_used == 0.0

    @pytest.mark.asyncio
    async def test_reports_range(self, calculator):
        stats = await calculator.utilization(SURFING_ID, FRIDAY, date(2025, 9, 6))
        assert stats.start_date == FRIDAY
        assert stats.end_date == date(2025, 9, 6)
        assert stats.total_slots == 1
