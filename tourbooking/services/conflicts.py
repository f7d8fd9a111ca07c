"""Overlap detection between bookings of the same activity."""

from __future__ import annotations

from datetime import datetime

from tourbooking.models import ACTIVE_STATUSES, Booking
from tourbooking.repository import Repository


def periods_overlap(s1: datetime, e1: datetime, s2: datetime, e2: datetime) -> bool:
    """Half-open ``[s, e)`` overlap; back-to-back periods do not overlap."""
    return s1 < e2 and s2 < e1


class ConflictDetector:
    """Finds capacity-consuming bookings that overlap a requested window."""

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    async def overlapping(
        self,
        activity_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: str | None = None,
    ) -> list[Booking]:
        bookings = await self._repo.list_bookings(
            activity_id=activity_id, status=ACTIVE_STATUSES
        )
        return [
            b
            for b in bookings
            if b.id != exclude_booking_id
            and periods_overlap(start, end, b.start_time, b.end_time)
        ]
