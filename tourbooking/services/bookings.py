"""
Booking write path.

Every create / update runs validate-then-write while holding the lock of
the activity it touches, so two requests for the last seats of a slot
cannot both pass validation inside one process. Rejected requests leave
no trace in the repository.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

from tourbooking.errors import (
    BookingRejectedError,
    InvalidStatusTransitionError,
    NotFoundError,
)
from tourbooking.models import (
    ACTIVE_STATUSES,
    Booking,
    BookingCreate,
    BookingStatus,
    BookingUpdate,
    apply_changes,
)
from tourbooking.repository import Repository
from tourbooking.services.validator import BookingValidator

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}

# Changing any of these can change slot load.
CAPACITY_FIELDS = ("activity_id", "start_time", "end_time", "participants", "agent_id")


def check_transition(current: BookingStatus, new: BookingStatus) -> None:
    if new == current:
        return
    if new not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(
            f"Cannot change booking status from {current} to {new}"
        )


class ActivityLocks:
    """One ``asyncio.Lock`` per activity id, created on first use."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, activity_id: str) -> asyncio.Lock:
        lock = self._locks.get(activity_id)
        if lock is None:
            lock = self._locks[activity_id] = asyncio.Lock()
        return lock

    def discard(self, activity_id: str) -> None:
        """Forget the lock of a deleted activity unless a write still holds it."""
        lock = self._locks.get(activity_id)
        if lock is not None and not lock.locked():
            del self._locks[activity_id]

    def __contains__(self, activity_id: object) -> bool:
        return activity_id in self._locks

    @asynccontextmanager
    async def hold(self, *activity_ids: str) -> AsyncIterator[None]:
        # Sorted acquisition keeps two-activity updates deadlock free.
        async with AsyncExitStack() as stack:
            for activity_id in sorted(set(activity_ids)):
                await stack.enter_async_context(self.get(activity_id))
            yield


class BookingService:
    def __init__(
        self,
        repo: Repository,
        locks: ActivityLocks | None = None,
        validator: BookingValidator | None = None,
    ) -> None:
        self._repo = repo
        self._locks = locks or ActivityLocks()
        self._validator = validator or BookingValidator(repo)

    async def create(self, data: BookingCreate) -> Booking:
        """Validate and persist a new ``pending`` booking."""
        if data.agent_id is not None and await self._repo.get_agent(data.agent_id) is None:
            raise NotFoundError("Agent not found")
        if await self._repo.get_activity(data.activity_id) is None:
            raise NotFoundError("Activity not found")

        async with self._locks.hold(data.activity_id):
            result = await self._validator.validate(
                data.activity_id,
                data.start_time,
                data.end_time,
                data.participants,
                agent_id=data.agent_id,
            )
            if not result.is_valid:
                logger.info(
                    "Rejected booking for activity %s (%s): %s",
                    data.activity_id,
                    result.validation_type,
                    result.error,
                )
                raise BookingRejectedError(result)
            booking = await self._repo.create_booking(data, status=BookingStatus.PENDING)

        logger.info(
            "Created booking %s for activity %s (%d participants)",
            booking.id,
            booking.activity_id,
            booking.participants,
        )
        return booking

    async def update(self, booking_id: str, data: BookingUpdate) -> Booking:
        """
        Apply a partial update.

        Re-validates (excluding the booking itself) only when a field that
        affects slot load changes and the resulting status still holds
        seats.
        """
        existing = await self._get(booking_id)
        changes = data.model_dump(exclude_unset=True)
        target_activity = changes.get("activity_id") or existing.activity_id

        if changes.get("agent_id") and await self._repo.get_agent(changes["agent_id"]) is None:
            raise NotFoundError("Agent not found")
        if target_activity != existing.activity_id and (
            await self._repo.get_activity(target_activity) is None
        ):
            raise NotFoundError("Activity not found")

        async with self._locks.hold(existing.activity_id, target_activity):
            existing = await self._get(booking_id)
            if "status" in changes:
                check_transition(existing.status, changes["status"])
            candidate = apply_changes(existing, changes)

            capacity_changed = any(
                getattr(candidate, field) != getattr(existing, field) for field in CAPACITY_FIELDS
            )
            if capacity_changed and candidate.status in ACTIVE_STATUSES:
                result = await self._validator.validate(
                    candidate.activity_id,
                    candidate.start_time,
                    candidate.end_time,
                    candidate.participants,
                    exclude_booking_id=booking_id,
                    agent_id=candidate.agent_id,
                )
                if not result.is_valid:
                    logger.info("Rejected update of booking %s: %s", booking_id, result.error)
                    raise BookingRejectedError(result)

            updated = await self._repo.update_booking(booking_id, changes)
            assert updated is not None

        logger.info("Updated booking %s (%s)", booking_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    async def change_status(self, booking_id: str, status: BookingStatus) -> Booking:
        existing = await self._get(booking_id)
        async with self._locks.hold(existing.activity_id):
            existing = await self._get(booking_id)
            check_transition(existing.status, status)
            if status == existing.status:
                return existing
            updated = await self._repo.update_booking(booking_id, {"status": status})
            assert updated is not None

        logger.info("Booking %s status %s -> %s", booking_id, existing.status, status)
        return updated

    async def delete(self, booking_id: str) -> None:
        existing = await self._get(booking_id)
        async with self._locks.hold(existing.activity_id):
            if not await self._repo.delete_booking(booking_id):
                raise NotFoundError("Booking not found")
        logger.info("Deleted booking %s", booking_id)

    async def _get(self, booking_id: str) -> Booking:
        booking = await self._repo.get_booking(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking
