"""
Booking validator.

``validate`` is a pure accept / reject predicate over a proposed booking;
it never writes. Checks run in a fixed order and the first failure wins:

  1. activity exists and is active
  2. participant count within the activity's bounds
  3. blackout dates: activity, then agent, then the agent's agency
  4. the activity runs on that weekday
  5. a recurring slot overlaps the requested time of day
  6. that slot is enabled
  7. load overlapping the slot or the request, plus the request, fits the slot capacity
"""

from __future__ import annotations

import logging
from datetime import datetime

from tourbooking.config import MAX_ALTERNATIVE_SLOTS
from tourbooking.errors import BookingRejectedError
from tourbooking.models import (
    BlackoutEntity,
    BookingValidationRequest,
    BookingValidationResponse,
    SlotInfo,
    ValidationResult,
    ValidationType,
)
from tourbooking.repository import Repository
from tourbooking.services.availability import AvailabilityCalculator
from tourbooking.services.blackout import BlackoutRegistry
from tourbooking.services.conflicts import ConflictDetector
from tourbooking.services.schedule import (
    find_matching_slot,
    slot_capacity,
    slot_window,
    slots_for_date,
)

logger = logging.getLogger(__name__)


class BookingValidator:
    def __init__(
        self,
        repo: Repository,
        conflicts: ConflictDetector | None = None,
        blackouts: BlackoutRegistry | None = None,
    ) -> None:
        self._repo = repo
        self._conflicts = conflicts or ConflictDetector(repo)
        self._blackouts = blackouts or BlackoutRegistry(repo)
        self._calculator = AvailabilityCalculator(repo, self._conflicts)

    async def validate(
        self,
        activity_id: str,
        start: datetime,
        end: datetime,
        participants: int,
        exclude_booking_id: str | None = None,
        agent_id: str | None = None,
    ) -> ValidationResult:
        activity = await self._repo.get_activity(activity_id)
        if activity is None or not activity.is_active:
            return ValidationResult.reject(
                ValidationType.ACTIVITY_UNAVAILABLE, "Activity not found or inactive"
            )

        if participants > activity.max_participants:
            return ValidationResult.reject(
                ValidationType.PARTICIPANT_LIMIT,
                f"Number of participants ({participants}) exceeds activity maximum "
                f"({activity.max_participants})",
            )
        if participants < activity.min_participants:
            return ValidationResult.reject(
                ValidationType.PARTICIPANT_LIMIT,
                f"Number of participants ({participants}) is below activity minimum "
                f"({activity.min_participants})",
            )

        blackout = await self._check_blackouts(activity_id, agent_id, start)
        if blackout is not None:
            return blackout

        if not slots_for_date(activity, start.date()):
            return ValidationResult.reject(
                ValidationType.SLOT_AVAILABILITY, "No schedule available for this day"
            )

        slot = find_matching_slot(activity, start, end)
        if slot is None:
            return ValidationResult.reject(
                ValidationType.SLOT_AVAILABILITY,
                "No available time slot found for requested time",
            )
        if not slot.is_available:
            return ValidationResult.reject(
                ValidationType.SLOT_AVAILABILITY, "Time slot is not available"
            )

        capacity = slot_capacity(slot, activity)
        # Seats are held for the whole slot, so load spans the slot and the request.
        slot_start, slot_end = slot_window(start.date(), slot)
        overlapping = await self._conflicts.overlapping(
            activity_id,
            min(start, slot_start),
            max(end, slot_end),
            exclude_booking_id=exclude_booking_id,
        )
        load = sum(b.participants for b in overlapping)
        if load + participants > capacity:
            return ValidationResult.reject(
                ValidationType.SLOT_AVAILABILITY,
                f"Slot capacity exceeded. Current: {load}, Requested: {participants}, "
                f"Maximum: {capacity}",
            )

        return ValidationResult(
            is_valid=True,
            slot=slot,
            slot_capacity=capacity,
            conflicting_bookings=overlapping,
        )

    async def _check_blackouts(
        self, activity_id: str, agent_id: str | None, start: datetime
    ) -> ValidationResult | None:
        day = start.date()
        if await self._blackouts.is_date_blocked(BlackoutEntity.ACTIVITY, activity_id, day):
            return ValidationResult.reject(
                ValidationType.ACTIVITY_UNAVAILABLE_DATE,
                f"Date {day} is unavailable for this activity",
            )

        if agent_id is None:
            return None
        agent = await self._repo.get_agent(agent_id)
        if agent is None:
            return None
        if day in agent.unavailable_dates:
            return ValidationResult.reject(
                ValidationType.AGENT_UNAVAILABLE_DATE,
                f"Date {day} is unavailable for agent {agent.name}",
            )
        if agent.agency_id and await self._blackouts.is_date_blocked(
            BlackoutEntity.AGENCY, agent.agency_id, day
        ):
            agency = await self._repo.get_agency(agent.agency_id)
            name = agency.name if agency else agent.agency_id
            return ValidationResult.reject(
                ValidationType.AGENCY_UNAVAILABLE_DATE,
                f"Date {day} is unavailable for agency {name}",
            )
        return None

    async def preflight(self, request: BookingValidationRequest) -> BookingValidationResponse:
        """
        Validate without writing and describe the matched slot.

        Raises ``BookingRejectedError`` when ``validate`` rejects. On success
        the response carries the slot's current load, how many active
        bookings overlap the request, and up to ``MAX_ALTERNATIVE_SLOTS``
        other slots on the same day that still fit the party.
        """
        result = await self.validate(
            request.activity_id,
            request.start_time,
            request.end_time,
            request.participants,
            exclude_booking_id=request.exclude_booking_id,
            agent_id=request.agent_id,
        )
        if not result.is_valid:
            logger.info("Pre-flight rejected: %s", result.error)
            raise BookingRejectedError(result)

        day = request.start_time.date()
        slots = await self._calculator.availability_for_date(request.activity_id, day)

        slot_info = None
        matched = result.slot
        for slot in slots:
            if matched and slot.start_time == matched.start_time and slot.end_time == matched.end_time:
                slot_info = SlotInfo(
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    max_capacity=slot.max_capacity,
                    current_bookings=slot.current_bookings,
                    remaining_capacity=slot.remaining_capacity,
                    capacity_after_booking=slot.remaining_capacity - request.participants,
                )
                break

        requested = (request.start_time.strftime("%H:%M"), request.end_time.strftime("%H:%M"))
        alternatives = [
            s
            for s in slots
            if s.is_available
            and s.remaining_capacity >= request.participants
            and (s.start_time, s.end_time) != requested
        ][:MAX_ALTERNATIVE_SLOTS]

        return BookingValidationResponse(
            slot_info=slot_info,
            conflicting_bookings=len(result.conflicting_bookings),
            alternative_slots=alternatives,
        )
