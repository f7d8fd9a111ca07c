"""
Data access layer.

``Repository`` is the async interface the services and routers depend on;
``InMemoryRepository`` keeps everything in plain dicts for the lifetime of
the process. A database-backed implementation only has to satisfy the
protocol.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any, Protocol
from uuid import uuid4

from tourbooking.models import (
    Activity,
    ActivityCreate,
    Agency,
    AgencyCreate,
    AgencyUnavailableSchedule,
    AgencyUnavailableScheduleCreate,
    Agent,
    AgentCreate,
    Booking,
    BookingCreate,
    BookingStatus,
    apply_changes,
)

logger = logging.getLogger(__name__)


class Repository(Protocol):
    """Storage interface for activities, bookings, agencies and agents."""

    # ── Activities ────────────────────────────────────────────────────
    async def get_activity(self, activity_id: str) -> Activity | None: ...

    async def list_activities(
        self,
        *,
        is_active: bool | None = None,
        search: str | None = None,
        category: str | None = None,
    ) -> list[Activity]: ...

    async def create_activity(
        self, data: ActivityCreate, *, entity_id: str | None = None
    ) -> Activity: ...

    async def update_activity(
        self, activity_id: str, changes: dict[str, Any]
    ) -> Activity | None: ...

    async def delete_activity(self, activity_id: str) -> bool: ...

    # ── Bookings ──────────────────────────────────────────────────────
    async def get_booking(self, booking_id: str) -> Booking | None: ...

    async def list_bookings(
        self,
        *,
        activity_id: str | None = None,
        agent_id: str | None = None,
        status: BookingStatus | Iterable[BookingStatus] | None = None,
        on_date: date | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        search: str | None = None,
    ) -> list[Booking]: ...

    async def create_booking(
        self,
        data: BookingCreate,
        *,
        status: BookingStatus = BookingStatus.PENDING,
        entity_id: str | None = None,
    ) -> Booking: ...

    async def update_booking(
        self, booking_id: str, changes: dict[str, Any]
    ) -> Booking | None: ...

    async def delete_booking(self, booking_id: str) -> bool: ...

    # ── Agencies ──────────────────────────────────────────────────────
    async def get_agency(self, agency_id: str) -> Agency | None: ...

    async def list_agencies(
        self, *, is_active: bool | None = None, search: str | None = None
    ) -> list[Agency]: ...

    async def create_agency(
        self, data: AgencyCreate, *, entity_id: str | None = None
    ) -> Agency: ...

    async def update_agency(
        self, agency_id: str, changes: dict[str, Any]
    ) -> Agency | None: ...

    async def delete_agency(self, agency_id: str) -> bool: ...

    # ── Agents ────────────────────────────────────────────────────────
    async def get_agent(self, agent_id: str) -> Agent | None: ...

    async def list_agents(
        self,
        *,
        agency_id: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> list[Agent]: ...

    async def email_exists(self, email: str, exclude_id: str | None = None) -> bool: ...

    async def create_agent(
        self, data: AgentCreate, *, entity_id: str | None = None
    ) -> Agent: ...

    async def update_agent(self, agent_id: str, changes: dict[str, Any]) -> Agent | None: ...

    async def delete_agent(self, agent_id: str) -> bool: ...

    # ── Agency unavailable schedules ──────────────────────────────────
    async def get_agency_schedule(self, schedule_id: str) -> AgencyUnavailableSchedule | None: ...

    async def list_agency_schedules(
        self,
        *,
        agency_id: str | None = None,
        on_date: date | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> list[AgencyUnavailableSchedule]: ...

    async def create_agency_schedule(
        self, data: AgencyUnavailableScheduleCreate, *, entity_id: str | None = None
    ) -> AgencyUnavailableSchedule: ...

    async def update_agency_schedule(
        self, schedule_id: str, changes: dict[str, Any]
    ) -> AgencyUnavailableSchedule | None: ...

    async def delete_agency_schedule(self, schedule_id: str) -> bool: ...

    # ── Maintenance ───────────────────────────────────────────────────
    async def reset(self) -> None: ...

    async def stats(self) -> dict[str, int]: ...


# ── Helpers ────────────────────────────────────────────────────────────────


def _now() -> datetime:
    return datetime.now(UTC)


def _matches(needle: str | None, *haystack: str | None) -> bool:
    if not needle:
        return True
    needle = needle.lower()
    return any(needle in value.lower() for value in haystack if value)


def _newest_first(items: Iterable[Any]) -> list[Any]:
    # Reversed insertion order breaks created_at ties.
    return sorted(reversed(list(items)), key=lambda item: item.created_at, reverse=True)


def _status_set(
    status: BookingStatus | Iterable[BookingStatus] | None,
) -> set[BookingStatus] | None:
    if status is None:
        return None
    if isinstance(status, str):
        return {BookingStatus(status)}
    return {BookingStatus(s) for s in status}


class InMemoryRepository:
    """Dict-backed repository; state lives only as long as the process."""

    def __init__(self) -> None:
        self._activities: dict[str, Activity] = {}
        self._bookings: dict[str, Booking] = {}
        self._agencies: dict[str, Agency] = {}
        self._agents: dict[str, Agent] = {}
        self._agency_schedules: dict[str, AgencyUnavailableSchedule] = {}

    # ── Generic plumbing ──────────────────────────────────────────────

    @staticmethod
    def _build(model_cls: type, data: Any, entity_id: str | None, **extra: Any) -> Any:
        now = _now()
        return model_cls.model_validate(
            {
                **data.model_dump(),
                **extra,
                "id": entity_id or str(uuid4()),
                "created_at": now,
                "updated_at": now,
            }
        )

    @staticmethod
    def _update(store: dict[str, Any], key: str, changes: dict[str, Any]) -> Any:
        existing = store.get(key)
        if existing is None:
            return None
        updated = apply_changes(
            existing, {**changes, "id": existing.id, "updated_at": _now()}
        )
        store[key] = updated
        return updated

    # ── Activities ────────────────────────────────────────────────────

    async def get_activity(self, activity_id: str) -> Activity | None:
        return self._activities.get(activity_id)

    async def list_activities(
        self,
        *,
        is_active: bool | None = None,
        search: str | None = None,
        category: str | None = None,
    ) -> list[Activity]:
        result = [
            a
            for a in self._activities.values()
            if (is_active is None or a.is_active == is_active)
            and (category is None or a.category == category)
            and _matches(search, a.title_en, a.title_ko, a.description_en, a.location)
        ]
        return _newest_first(result)

    async def create_activity(
        self, data: ActivityCreate, *, entity_id: str | None = None
    ) -> Activity:
        activity = self._build(Activity, data, entity_id)
        self._activities[activity.id] = activity
        return activity

    async def update_activity(
        self, activity_id: str, changes: dict[str, Any]
    ) -> Activity | None:
        return self._update(self._activities, activity_id, changes)

    async def delete_activity(self, activity_id: str) -> bool:
        return self._activities.pop(activity_id, None) is not None

    # ── Bookings ──────────────────────────────────────────────────────

    async def get_booking(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    async def list_bookings(
        self,
        *,
        activity_id: str | None = None,
        agent_id: str | None = None,
        status: BookingStatus | Iterable[BookingStatus] | None = None,
        on_date: date | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        search: str | None = None,
    ) -> list[Booking]:
        statuses = _status_set(status)
        result = []
        for b in self._bookings.values():
            day = b.start_time.date()
            if activity_id is not None and b.activity_id != activity_id:
                continue
            if agent_id is not None and b.agent_id != agent_id:
                continue
            if statuses is not None and b.status not in statuses:
                continue
            if on_date is not None and day != on_date:
                continue
            if date_from is not None and day < date_from:
                continue
            if date_to is not None and day > date_to:
                continue
            if not _matches(search, b.customer_name, b.customer_email):
                continue
            result.append(b)
        return _newest_first(result)

    async def create_booking(
        self,
        data: BookingCreate,
        *,
        status: BookingStatus = BookingStatus.PENDING,
        entity_id: str | None = None,
    ) -> Booking:
        booking = self._build(Booking, data, entity_id, status=status)
        self._bookings[booking.id] = booking
        return booking

    async def update_booking(
        self, booking_id: str, changes: dict[str, Any]
    ) -> Booking | None:
        return self._update(self._bookings, booking_id, changes)

    async def delete_booking(self, booking_id: str) -> bool:
        return self._bookings.pop(booking_id, None) is not None

    # ── Agencies ──────────────────────────────────────────────────────

    async def get_agency(self, agency_id: str) -> Agency | None:
        return self._agencies.get(agency_id)

    async def list_agencies(
        self, *, is_active: bool | None = None, search: str | None = None
    ) -> list[Agency]:
        result = [
            a
            for a in self._agencies.values()
            if (is_active is None or a.is_active == is_active)
            and _matches(search, a.name, a.description, a.email)
        ]
        return _newest_first(result)

    async def create_agency(
        self, data: AgencyCreate, *, entity_id: str | None = None
    ) -> Agency:
        agency = self._build(Agency, data, entity_id)
        self._agencies[agency.id] = agency
        return agency

    async def update_agency(
        self, agency_id: str, changes: dict[str, Any]
    ) -> Agency | None:
        return self._update(self._agencies, agency_id, changes)

    async def delete_agency(self, agency_id: str) -> bool:
        return self._agencies.pop(agency_id, None) is not None

    # ── Agents ────────────────────────────────────────────────────────

    async def get_agent(self, agent_id: str) -> Agent | None:
        return self._agents.get(agent_id)

    async def list_agents(
        self,
        *,
        agency_id: str | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> list[Agent]:
        result = [
            a
            for a in self._agents.values()
            if (agency_id is None or a.agency_id == agency_id)
            and (is_active is None or a.is_active == is_active)
            and _matches(search, a.name, a.email, a.bio)
        ]
        return _newest_first(result)

    async def email_exists(self, email: str, exclude_id: str | None = None) -> bool:
        email = email.lower()
        return any(
            a.email.lower() == email and a.id != exclude_id for a in self._agents.values()
        )

    async def create_agent(
        self, data: AgentCreate, *, entity_id: str | None = None
    ) -> Agent:
        agent = self._build(Agent, data, entity_id)
        self._agents[agent.id] = agent
        return agent

    async def update_agent(self, agent_id: str, changes: dict[str, Any]) -> Agent | None:
        return self._update(self._agents, agent_id, changes)

    async def delete_agent(self, agent_id: str) -> bool:
        return self._agents.pop(agent_id, None) is not None

    # ── Agency unavailable schedules ──────────────────────────────────

    async def get_agency_schedule(self, schedule_id: str) -> AgencyUnavailableSchedule | None:
        return self._agency_schedules.get(schedule_id)

    async def list_agency_schedules(
        self,
        *,
        agency_id: str | None = None,
        on_date: date | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> list[AgencyUnavailableSchedule]:
        result = [
            s
            for s in self._agency_schedules.values()
            if (agency_id is None or s.agency_id == agency_id)
            and (on_date is None or s.date == on_date)
            and (date_from is None or s.date >= date_from)
            and (date_to is None or s.date <= date_to)
            and (is_active is None or s.is_active == is_active)
            and _matches(search, s.reason)
        ]
        return _newest_first(result)

    async def create_agency_schedule(
        self, data: AgencyUnavailableScheduleCreate, *, entity_id: str | None = None
    ) -> AgencyUnavailableSchedule:
        schedule = self._build(AgencyUnavailableSchedule, data, entity_id)
        self._agency_schedules[schedule.id] = schedule
        return schedule

    async def update_agency_schedule(
        self, schedule_id: str, changes: dict[str, Any]
    ) -> AgencyUnavailableSchedule | None:
        return self._update(self._agency_schedules, schedule_id, changes)

    async def delete_agency_schedule(self, schedule_id: str) -> bool:
        return self._agency_schedules.pop(schedule_id, None) is not None

    # ── Maintenance ───────────────────────────────────────────────────

    async def reset(self) -> None:
        """Drop every record."""
        for store in (
            self._activities,
            self._bookings,
            self._agencies,
            self._agents,
            self._agency_schedules,
        ):
            store.clear()
        logger.info("In-memory repository reset")

    async def stats(self) -> dict[str, int]:
        return {
            "activities": len(self._activities),
            "bookings": len(self._bookings),
            "agencies": len(self._agencies),
            "agents": len(self._agents),
            "agency_unavailable_schedules": len(self._agency_schedules),
        }
