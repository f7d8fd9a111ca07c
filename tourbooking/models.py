"""Pydantic models for the Tour Booking API."""

from __future__ import annotations

import re
from datetime import date, datetime
from enum import StrEnum
from typing import Annotated, Any, Generic, TypeVar

from fastapi import status
from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    EmailStr,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from tourbooking.errors import InvalidDateError, ValidationFailedError, format_validation_errors

T = TypeVar("T")

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
_DATE_RE = re.compile(DATE_PATTERN)


# ── Scalar helpers ─────────────────────────────────────────────────────────


def parse_iso_date(value: Any) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise InvalidDateError(f"Invalid date format: {value}. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidDateError(f"Invalid date format: {value}. Use YYYY-MM-DD") from None


def _wall_clock(value: datetime) -> datetime:
    # Booking times are compared as activity-local wall-clock times.
    return value.replace(tzinfo=None)


IsoDate = Annotated[date, BeforeValidator(parse_iso_date)]
Timestamp = Annotated[datetime, AfterValidator(_wall_clock)]
TimeOfDay = Annotated[str, Field(pattern=TIME_PATTERN, description="Wall-clock time (HH:mm)")]


# ── Enums ──────────────────────────────────────────────────────────────────


class BookingStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


# Only these statuses consume slot capacity.
ACTIVE_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED}
)


class ValidationType(StrEnum):
    """Discriminator carried by a rejected booking validation."""

    ACTIVITY_UNAVAILABLE = "activity_unavailable"
    PARTICIPANT_LIMIT = "participant_limit"
    ACTIVITY_UNAVAILABLE_DATE = "activity_unavailable_date"
    AGENT_UNAVAILABLE_DATE = "agent_unavailable_date"
    AGENCY_UNAVAILABLE_DATE = "agency_unavailable_date"
    SLOT_AVAILABILITY = "slot_availability"


# Static bounds are 400; everything that depends on the calendar is 409.
_STATIC_VALIDATION_TYPES = frozenset(
    {ValidationType.ACTIVITY_UNAVAILABLE, ValidationType.PARTICIPANT_LIMIT}
)


class BlackoutEntity(StrEnum):
    ACTIVITY = "activity"
    AGENCY = "agency"
    AGENT = "agent"


# ── Schedule ───────────────────────────────────────────────────────────────


class ScheduleSlot(BaseModel):
    """One recurring bookable window on a weekday."""

    id: str | None = Field(None, description="Slot identifier")
    start_time: TimeOfDay
    end_time: TimeOfDay
    is_available: bool = Field(default=True, description="False disables the slot permanently")
    max_capacity: int | None = Field(
        None, gt=0, le=1000, description="Participant seats (defaults to activity max_participants)"
    )

    @model_validator(mode="after")
    def _check_order(self) -> ScheduleSlot:
        if self.start_time >= self.end_time:
            raise ValueError("Slot start_time must be before end_time")
        return self


class DailySchedule(BaseModel):
    """Recurring slots for one day of week (0=Sunday, 6=Saturday)."""

    day_of_week: int = Field(..., ge=0, le=6, description="Day of week (0=Sunday, 6=Saturday)")
    time_slots: list[ScheduleSlot] = Field(default_factory=list)


def check_unique_weekdays(schedules: list[DailySchedule]) -> list[DailySchedule]:
    seen: set[int] = set()
    for schedule in schedules:
        if schedule.day_of_week in seen:
            raise ValueError(f"Duplicate schedule for day_of_week {schedule.day_of_week}")
        seen.add(schedule.day_of_week)
    return schedules


def check_participant_bounds(min_participants: int, max_participants: int) -> None:
    if min_participants > max_participants:
        raise ValueError("Min participants cannot exceed max participants")


# ── Activity ───────────────────────────────────────────────────────────────


class ActivityBase(BaseModel):
    title_en: str = Field(..., min_length=1, max_length=255)
    title_ko: str | None = Field(None, max_length=255)
    description_en: str | None = Field(None, max_length=2000)
    description_ko: str | None = Field(None, max_length=2000)
    image_url: str | None = None
    price_usd: float = Field(..., gt=0, le=999999.99)
    duration_minutes: int = Field(..., gt=0, le=1440)
    max_participants: int = Field(..., gt=0, le=1000)
    min_participants: int = Field(default=1, gt=0)
    location: str | None = Field(None, max_length=255)
    category: str | None = Field(None, max_length=100)
    tags: list[str] = Field(default_factory=list)
    daily_schedules: list[DailySchedule] = Field(default_factory=list)
    unavailable_dates: list[IsoDate] = Field(default_factory=list)

    @field_validator("daily_schedules")
    @classmethod
    def _unique_weekdays(cls, value: list[DailySchedule]) -> list[DailySchedule]:
        return check_unique_weekdays(value)

    @model_validator(mode="after")
    def _check_bounds(self) -> ActivityBase:
        check_participant_bounds(self.min_participants, self.max_participants)
        return self


class ActivityCreate(ActivityBase):
    """Request to create an activity."""


class Activity(ActivityBase):
    """A bookable tour / experience with a recurring weekly schedule."""

    id: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class ActivityUpdate(BaseModel):
    """Partial activity update; only supplied fields change."""

    title_en: str | None = Field(None, min_length=1, max_length=255)
    title_ko: str | None = Field(None, max_length=255)
    description_en: str | None = Field(None, max_length=2000)
    description_ko: str | None = Field(None, max_length=2000)
    image_url: str | None = None
    price_usd: float | None = Field(None, gt=0, le=999999.99)
    duration_minutes: int | None = Field(None, gt=0, le=1440)
    max_participants: int | None = Field(None, gt=0, le=1000)
    min_participants: int | None = Field(None, gt=0)
    location: str | None = Field(None, max_length=255)
    category: str | None = Field(None, max_length=100)
    tags: list[str] | None = None
    daily_schedules: list[DailySchedule] | None = None
    unavailable_dates: list[IsoDate] | None = None
    is_active: bool | None = None

    @field_validator("daily_schedules")
    @classmethod
    def _unique_weekdays(cls, value: list[DailySchedule] | None) -> list[DailySchedule] | None:
        return None if value is None else check_unique_weekdays(value)


# ── Agency / agent ─────────────────────────────────────────────────────────


class AgencyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    address: str | None = None
    phone: str | None = None
    email: EmailStr | None = None
    website: str | None = None
    logo_url: str | None = None


class Agency(AgencyCreate):
    """A travel agency that agents belong to."""

    id: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class AgencyUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    address: str | None = None
    phone: str | None = None
    email: EmailStr | None = None
    website: str | None = None
    logo_url: str | None = None
    is_active: bool | None = None


class AgentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str | None = None
    bio: str | None = Field(None, max_length=1000)
    languages: list[str] = Field(default_factory=list)
    specialties: list[str] = Field(default_factory=list)
    hourly_rate: float | None = Field(None, gt=0)
    max_hours_per_day: int = Field(default=8, ge=1, le=24)
    agency_id: str | None = Field(None, min_length=1, description="Owning agency")
    unavailable_dates: list[IsoDate] = Field(default_factory=list)


class Agent(AgentCreate):
    """A staff member (guide / agent) who can be assigned to bookings."""

    id: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class AgentUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = None
    bio: str | None = Field(None, max_length=1000)
    languages: list[str] | None = None
    specialties: list[str] | None = None
    hourly_rate: float | None = Field(None, gt=0)
    max_hours_per_day: int | None = Field(None, ge=1, le=24)
    agency_id: str | None = Field(None, min_length=1)
    unavailable_dates: list[IsoDate] | None = None
    is_active: bool | None = None


class AgencyUnavailableScheduleCreate(BaseModel):
    agency_id: str = Field(..., min_length=1)
    date: IsoDate
    reason: str | None = Field(None, max_length=500)
    is_active: bool = True


class AgencyUnavailableSchedule(AgencyUnavailableScheduleCreate):
    """A whole-day blackout for every agent of an agency."""

    id: str
    created_at: datetime
    updated_at: datetime


class AgencyUnavailableScheduleUpdate(BaseModel):
    date: IsoDate | None = None
    reason: str | None = Field(None, max_length=500)
    is_active: bool | None = None


# ── Booking ────────────────────────────────────────────────────────────────


class BookingCreate(BaseModel):
    """Request to create a booking."""

    activity_id: str = Field(..., min_length=1)
    agent_id: str | None = Field(None, description="Assigned agent (optional)")
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: EmailStr
    customer_phone: str | None = None
    participants: int = Field(..., gt=0, le=1000, description="Participant seats requested")
    start_time: Timestamp
    end_time: Timestamp
    total_price_usd: float | None = Field(None, gt=0, le=999999.99)
    notes: str | None = Field(None, max_length=1000)

    @model_validator(mode="after")
    def _check_order(self) -> BookingCreate:
        if self.start_time >= self.end_time:
            raise ValueError("Start time must be before end time")
        return self


class Booking(BookingCreate):
    """A reservation of participant seats at an absolute date and time."""

    id: str
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime
    updated_at: datetime


class BookingUpdate(BaseModel):
    """Partial booking update; only supplied fields change."""

    activity_id: str | None = Field(None, min_length=1)
    agent_id: str | None = None
    customer_name: str | None = Field(None, min_length=1, max_length=255)
    customer_email: EmailStr | None = None
    customer_phone: str | None = None
    participants: int | None = Field(None, gt=0, le=1000)
    start_time: Timestamp | None = None
    end_time: Timestamp | None = None
    total_price_usd: float | None = Field(None, gt=0, le=999999.99)
    status: BookingStatus | None = None
    notes: str | None = Field(None, max_length=1000)

    @model_validator(mode="after")
    def _check_order(self) -> BookingUpdate:
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValueError("Start time must be before end time")
        return self


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingValidationRequest(BookingCreate):
    """Pre-flight check; ``exclude_booking_id`` validates an update."""

    exclude_booking_id: str | None = None


# ── Availability ───────────────────────────────────────────────────────────


class SlotAvailability(BaseModel):
    """Derived load of one recurring slot on a concrete date."""

    slot_id: str | None = None
    start_time: str
    end_time: str
    max_capacity: int
    current_bookings: int = Field(..., description="Sum of participants, not booking count")
    remaining_capacity: int
    is_available: bool


class AvailabilitySummary(BaseModel):
    total_slots: int
    available_slots: int
    fully_booked_slots: int
    total_capacity: int
    total_bookings: int


class ActivityAvailabilityResponse(BaseModel):
    activity_id: str
    date: IsoDate
    blocked: bool = Field(False, description="The activity is blacked out on this date")
    slots: list[SlotAvailability]
    summary: AvailabilitySummary


class UtilizationStats(BaseModel):
    activity_id: str
    start_date: date
    end_date: date
    total_slots: int
    booked_slots: int
    utilization_rate: float = Field(..., description="Percent of slots with any booking")
    average_capacity_used: float = Field(..., description="Percent of seats sold")


# ── Validation ─────────────────────────────────────────────────────────────


class ValidationResult(BaseModel):
    """Outcome of the booking validator; a pure accept / reject decision."""

    is_valid: bool
    error: str | None = None
    validation_type: ValidationType | None = None
    slot: ScheduleSlot | None = None
    slot_capacity: int | None = None
    conflicting_bookings: list[Booking] = Field(default_factory=list)

    @classmethod
    def reject(cls, validation_type: ValidationType, error: str) -> ValidationResult:
        return cls(is_valid=False, error=error, validation_type=validation_type)

    @property
    def http_status(self) -> int:
        if self.is_valid:
            return status.HTTP_200_OK
        if self.validation_type in _STATIC_VALIDATION_TYPES:
            return status.HTTP_400_BAD_REQUEST
        return status.HTTP_409_CONFLICT


class SlotInfo(BaseModel):
    start_time: str
    end_time: str
    max_capacity: int
    current_bookings: int
    remaining_capacity: int
    capacity_after_booking: int


class BookingValidationResponse(BaseModel):
    is_valid: bool = True
    message: str = "Booking can be created successfully"
    slot_info: SlotInfo | None = None
    conflicting_bookings: int = Field(0, description="Overlapping active bookings")
    alternative_slots: list[SlotAvailability] = Field(default_factory=list)


# ── Blackout dates ─────────────────────────────────────────────────────────


class UnavailableDateRequest(BaseModel):
    date: str = Field(..., description="Date to block (YYYY-MM-DD)")


class UnavailableDatesReplace(BaseModel):
    unavailable_dates: list[str] = Field(..., description="Full replacement set (YYYY-MM-DD)")


class UnavailableDatesResponse(BaseModel):
    entity_type: BlackoutEntity
    entity_id: str
    unavailable_dates: list[date]
    total_dates: int
    added_date: date | None = None
    removed_date: date | None = None


# ── Common ─────────────────────────────────────────────────────────────────


class PaginationMeta(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int


class ListResponse(BaseModel, Generic[T]):
    items: list[T]
    meta: PaginationMeta


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    success: bool = False
    error: str
    validation_type: str | None = None
    details: Any | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
    stats: dict[str, int] = Field(default_factory=dict)


M = TypeVar("M", bound=BaseModel)


def apply_changes(model: M, changes: dict[str, Any]) -> M:
    """
    Return a re-validated copy of ``model`` with ``changes`` merged in.

    Raises ``ValidationFailedError`` when the merged record breaks a model
    rule (e.g. ``min_participants`` above ``max_participants`` after a
    partial update).
    """
    data = model.model_dump()
    data.update(changes)
    try:
        return type(model).model_validate(data)
    except ValidationError as exc:
        raise ValidationFailedError(
            "Invalid update", details=format_validation_errors(exc.errors())
        ) from None
