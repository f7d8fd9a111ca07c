"""
Blackout registry.

Whole-day unavailability for three kinds of entity:

  • activity – ``Activity.unavailable_dates``
  • agent    – ``Agent.unavailable_dates``
  • agency   – active ``AgencyUnavailableSchedule`` records

Every date is a strict ``YYYY-MM-DD`` calendar date.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from tourbooking.errors import (
    DateNotFoundError,
    InvalidDateError,
    NotFoundError,
    ValidationFailedError,
)
from tourbooking.models import (
    AgencyUnavailableSchedule,
    AgencyUnavailableScheduleCreate,
    AgencyUnavailableScheduleUpdate,
    BlackoutEntity,
    parse_iso_date,
)
from tourbooking.repository import Repository

logger = logging.getLogger(__name__)


class DuplicateScheduleError(ValidationFailedError):
    """An active agency schedule already covers this date."""


def _coerce(value: date | str) -> date:
    try:
        return parse_iso_date(value)
    except InvalidDateError:
        raise InvalidDateError("Invalid date format. Use YYYY-MM-DD") from None


class BlackoutRegistry:
    """Reads and mutates blackout dates through the repository."""

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    # ── Queries ───────────────────────────────────────────────────────

    async def is_date_blocked(
        self, entity_type: BlackoutEntity, entity_id: str, day: date
    ) -> bool:
        if entity_type is BlackoutEntity.AGENCY:
            # Schedules are looked up directly; a missing agency simply has none.
            entries = await self._repo.list_agency_schedules(
                agency_id=entity_id, on_date=day, is_active=True
            )
            return bool(entries)
        return day in await self._entity_dates(entity_type, entity_id)

    async def list_dates(self, entity_type: BlackoutEntity, entity_id: str) -> list[date]:
        if entity_type is BlackoutEntity.AGENCY:
            await self._require_agency(entity_id)
            entries = await self._repo.list_agency_schedules(
                agency_id=entity_id, is_active=True
            )
            return sorted({e.date for e in entries})
        return sorted(await self._entity_dates(entity_type, entity_id))

    async def agency_dates_in_range(
        self, agency_id: str, date_from: date | None = None, date_to: date | None = None
    ) -> list[date]:
        entries = await self._repo.list_agency_schedules(
            agency_id=agency_id, date_from=date_from, date_to=date_to, is_active=True
        )
        return sorted({e.date for e in entries})

    # ── Mutations ─────────────────────────────────────────────────────

    async def add_date(
        self, entity_type: BlackoutEntity, entity_id: str, value: date | str
    ) -> bool:
        """
        Block one date.

        Returns ``False`` (and changes nothing) when the date is already
        blocked. Raises ``InvalidDateError`` for malformed dates and
        ``NotFoundError`` for an unknown entity.
        """
        day = _coerce(value)
        if entity_type is BlackoutEntity.AGENCY:
            await self._require_agency(entity_id)
            if await self.is_date_blocked(entity_type, entity_id, day):
                return False
            await self._repo.create_agency_schedule(
                AgencyUnavailableScheduleCreate(agency_id=entity_id, date=day)
            )
        else:
            current = await self._entity_dates(entity_type, entity_id)
            if day in current:
                return False
            await self._store(entity_type, entity_id, sorted({*current, day}))
        logger.info("Blocked %s %s on %s", entity_type, entity_id, day)
        return True

    async def remove_date(
        self, entity_type: BlackoutEntity, entity_id: str, value: date | str
    ) -> None:
        """Unblock one date; ``DateNotFoundError`` when it was not blocked."""
        day = _coerce(value)
        if entity_type is BlackoutEntity.AGENCY:
            await self._require_agency(entity_id)
            entries = await self._repo.list_agency_schedules(
                agency_id=entity_id, on_date=day, is_active=True
            )
            if not entries:
                raise DateNotFoundError("Date is not in unavailable dates list")
            for entry in entries:
                await self._repo.delete_agency_schedule(entry.id)
        else:
            current = await self._entity_dates(entity_type, entity_id)
            if day not in current:
                raise DateNotFoundError("Date is not in unavailable dates list")
            await self._store(entity_type, entity_id, sorted(d for d in current if d != day))
        logger.info("Unblocked %s %s on %s", entity_type, entity_id, day)

    async def set_dates(
        self, entity_type: BlackoutEntity, entity_id: str, values: Iterable[date | str]
    ) -> list[date]:
        """Replace the whole set; every value is validated before anything changes."""
        days: set[date] = set()
        for value in values:
            try:
                days.add(parse_iso_date(value))
            except InvalidDateError:
                raise InvalidDateError(
                    f"Invalid date format: {value}. Use YYYY-MM-DD"
                ) from None
        result = sorted(days)

        if entity_type is BlackoutEntity.AGENCY:
            await self._require_agency(entity_id)
            existing = await self._repo.list_agency_schedules(
                agency_id=entity_id, is_active=True
            )
            kept = set()
            for entry in existing:
                if entry.date in days:
                    kept.add(entry.date)
                else:
                    await self._repo.delete_agency_schedule(entry.id)
            for day in result:
                if day not in kept:
                    await self._repo.create_agency_schedule(
                        AgencyUnavailableScheduleCreate(agency_id=entity_id, date=day)
                    )
        else:
            await self._entity_dates(entity_type, entity_id)
            await self._store(entity_type, entity_id, result)

        logger.info("Replaced blackout dates of %s %s (%d dates)", entity_type, entity_id, len(result))
        return result

    # ── Agency schedules ──────────────────────────────────────────────

    async def create_agency_schedule(
        self, data: AgencyUnavailableScheduleCreate
    ) -> AgencyUnavailableSchedule:
        await self._require_agency(data.agency_id)
        if data.is_active:
            await self._ensure_no_duplicate(data.agency_id, data.date)
        schedule = await self._repo.create_agency_schedule(data)
        logger.info("Created agency schedule %s for %s on %s", schedule.id, data.agency_id, data.date)
        return schedule

    async def update_agency_schedule(
        self, schedule_id: str, data: AgencyUnavailableScheduleUpdate
    ) -> AgencyUnavailableSchedule:
        existing = await self._repo.get_agency_schedule(schedule_id)
        if existing is None:
            raise NotFoundError("Agency unavailable schedule not found")
        changes = data.model_dump(exclude_unset=True)
        new_date = changes.get("date") or existing.date
        will_be_active = changes.get("is_active", existing.is_active)
        if will_be_active and (new_date != existing.date or not existing.is_active):
            await self._ensure_no_duplicate(existing.agency_id, new_date, exclude_id=schedule_id)
        updated = await self._repo.update_agency_schedule(schedule_id, changes)
        assert updated is not None
        return updated

    async def delete_agency_schedule(self, schedule_id: str) -> None:
        if not await self._repo.delete_agency_schedule(schedule_id):
            raise NotFoundError("Agency unavailable schedule not found")
        logger.info("Deleted agency schedule %s", schedule_id)

    # ── Internals ─────────────────────────────────────────────────────

    async def _require_agency(self, agency_id: str) -> None:
        if await self._repo.get_agency(agency_id) is None:
            raise NotFoundError("Agency not found")

    async def _ensure_no_duplicate(
        self, agency_id: str, day: date, exclude_id: str | None = None
    ) -> None:
        entries = await self._repo.list_agency_schedules(
            agency_id=agency_id, on_date=day, is_active=True
        )
        if any(e.id != exclude_id for e in entries):
            raise DuplicateScheduleError(
                "Unavailable schedule already exists for this agency and date"
            )

    async def _entity_dates(self, entity_type: BlackoutEntity, entity_id: str) -> list[date]:
        if entity_type is BlackoutEntity.ACTIVITY:
            activity = await self._repo.get_activity(entity_id)
            if activity is None:
                raise NotFoundError("Activity not found")
            return list(activity.unavailable_dates)
        if entity_type is BlackoutEntity.AGENT:
            agent = await self._repo.get_agent(entity_id)
            if agent is None:
                raise NotFoundError("Agent not found")
            return list(agent.unavailable_dates)
        raise ValueError(f"Unsupported blackout entity: {entity_type}")

    async def _store(self, entity_type: BlackoutEntity, entity_id: str, days: list[date]) -> None:
        changes = {"unavailable_dates": days}
        if entity_type is BlackoutEntity.ACTIVITY:
            await self._repo.update_activity(entity_id, changes)
        else:
            await self._repo.update_agent(entity_id, changes)
