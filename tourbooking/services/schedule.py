"""
Weekly schedule helpers.

An activity repeats the same slots every week; a slot becomes a concrete
window only once it is paired with a calendar date. Weekdays are numbered
Sunday-first (0 = Sunday, 6 = Saturday).
"""

from __future__ import annotations

from datetime import date, datetime, time

from tourbooking.models import Activity, ScheduleSlot

MINUTES_PER_DAY = 24 * 60


def day_of_week(day: date) -> int:
    """Sunday-first weekday index (Python's ``weekday()`` is Monday-first)."""
    return (day.weekday() + 1) % 7


def slots_for_date(activity: Activity, day: date) -> list[ScheduleSlot]:
    """Slots offered on ``day``; empty when the activity does not run that weekday."""
    weekday = day_of_week(day)
    for schedule in activity.daily_schedules:
        if schedule.day_of_week == weekday:
            return list(schedule.time_slots)
    return []


def slot_capacity(slot: ScheduleSlot, activity: Activity) -> int:
    return slot.max_capacity or activity.max_participants


def to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def slot_window(day: date, slot: ScheduleSlot) -> tuple[datetime, datetime]:
    """Absolute ``[start, end)`` of ``slot`` on ``day``."""
    start = datetime.combine(day, time.fromisoformat(slot.start_time))
    end = datetime.combine(day, time.fromisoformat(slot.end_time))
    return start, end


def time_range_minutes(start: datetime, end: datetime) -> tuple[int, int]:
    """
    Minutes since midnight of the start day for both ends of a booking.

    An end on a later calendar day keeps counting past 1440 so a booking
    that crosses midnight still orders after its start.
    """
    start_min = start.hour * 60 + start.minute
    end_min = end.hour * 60 + end.minute
    end_min += (end.date() - start.date()).days * MINUTES_PER_DAY
    return start_min, end_min


def find_matching_slot(
    activity: Activity, start: datetime, end: datetime
) -> ScheduleSlot | None:
    """First slot on the start date whose time-of-day window overlaps ``[start, end)``."""
    req_start, req_end = time_range_minutes(start, end)
    for slot in slots_for_date(activity, start.date()):
        if req_start < to_minutes(slot.end_time) and to_minutes(slot.start_time) < req_end:
            return slot
    return None
