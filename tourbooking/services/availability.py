"""
Slot availability calculator.

Derives per-slot load for a concrete date from the bookings that overlap
each slot's absolute window. Load is counted in participant seats, never
in number of reservations.
"""

from __future__ import annotations

from datetime import date, timedelta

from tourbooking.models import (
    AvailabilitySummary,
    SlotAvailability,
    UtilizationStats,
)
from tourbooking.repository import Repository
from tourbooking.services.conflicts import ConflictDetector
from tourbooking.services.schedule import slot_capacity, slot_window, slots_for_date


def summarize(slots: list[SlotAvailability]) -> AvailabilitySummary:
    return AvailabilitySummary(
        total_slots=len(slots),
        available_slots=sum(1 for s in slots if s.is_available),
        fully_booked_slots=sum(1 for s in slots if s.remaining_capacity == 0),
        total_capacity=sum(s.max_capacity for s in slots),
        total_bookings=sum(s.current_bookings for s in slots),
    )


class AvailabilityCalculator:
    def __init__(self, repo: Repository, conflicts: ConflictDetector | None = None) -> None:
        self._repo = repo
        self._conflicts = conflicts or ConflictDetector(repo)

    async def availability_for_date(
        self, activity_id: str, day: date
    ) -> list[SlotAvailability]:
        """
        One entry per recurring slot on ``day``'s weekday.

        Returns ``[]`` for an unknown activity or a weekday without a
        schedule; a fully booked day still returns its slots with
        ``remaining_capacity == 0``.
        """
        activity = await self._repo.get_activity(activity_id)
        if activity is None:
            return []

        result = []
        for slot in slots_for_date(activity, day):
            start, end = slot_window(day, slot)
            overlapping = await self._conflicts.overlapping(activity_id, start, end)
            load = sum(b.participants for b in overlapping)
            capacity = slot_capacity(slot, activity)
            remaining = max(0, capacity - load)
            result.append(
                SlotAvailability(
                    slot_id=slot.id,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    max_capacity=capacity,
                    current_bookings=load,
                    remaining_capacity=remaining,
                    is_available=slot.is_available and remaining > 0,
                )
            )
        return result

    async def available_slots_for_date(
        self, activity_id: str, day: date, min_participants: int = 1
    ) -> list[SlotAvailability]:
        """Slots that can still take ``min_participants`` more seats."""
        slots = await self.availability_for_date(activity_id, day)
        return [s for s in slots if s.is_available and s.remaining_capacity >= min_participants]

    async def utilization(
        self, activity_id: str, start_date: date, end_date: date
    ) -> UtilizationStats:
        """Share of slots with any booking and of seats sold, over an inclusive range."""
        total_slots = 0
        booked_slots = 0
        total_capacity = 0
        total_load = 0

        day = start_date
        while day <= end_date:
            for slot in await self.availability_for_date(activity_id, day):
                total_slots += 1
                total_capacity += slot.max_capacity
                total_load += slot.current_bookings
                if slot.current_bookings > 0:
                    booked_slots += 1
            day += timedelta(days=1)

        utilization_rate = booked_slots / total_slots * 100 if total_slots else 0.0
        capacity_used = total_load / total_capacity * 100 if total_capacity else 0.0
        return UtilizationStats(
            activity_id=activity_id,
            start_date=start_date,
            end_date=end_date,
            total_slots=total_slots,
            booked_slots=booked_slots,
            utilization_rate=round(utilization_rate, 2),
            average_capacity_used=round(capacity_used, 2),
        )
