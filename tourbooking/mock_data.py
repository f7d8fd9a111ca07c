"""Demo data loaded into the in-memory repository on startup."""

from __future__ import annotations

import logging
from datetime import datetime

from tourbooking.models import (
    ActivityCreate,
    AgencyCreate,
    AgentCreate,
    BookingCreate,
    BookingStatus,
    DailySchedule,
    ScheduleSlot,
)
from tourbooking.repository import Repository

logger = logging.getLogger(__name__)


def _every_day(prefix: str, windows: list[tuple[str, str]], capacity: int) -> list[DailySchedule]:
    """Same slot windows on all seven weekdays, with stable slot ids."""
    schedules = []
    counter = 1
    for day in range(7):
        slots = []
        for start, end in windows:
            slots.append(
                ScheduleSlot(
                    id=f"{prefix}-{counter}",
                    start_time=start,
                    end_time=end,
                    max_capacity=capacity,
                )
            )
            counter += 1
        schedules.append(DailySchedule(day_of_week=day, time_slots=slots))
    return schedules


AGENCIES: dict[str, AgencyCreate] = {
    "agency-001": AgencyCreate(
        name="Hawaii Adventure Tours",
        description="Outdoor activities and cultural experiences across Oahu.",
        address="123 Waikiki Beach Rd, Honolulu, HI 96815",
        phone="+1-808-555-0100",
        email="info@hawaii-adventure.com",
        website="https://hawaii-adventure.com",
    ),
    "agency-002": AgencyCreate(
        name="Pacific Ocean Explorers",
        description="Diving, snorkeling and water sports.",
        address="456 Ala Moana Blvd, Honolulu, HI 96814",
        phone="+1-808-555-0200",
        email="info@pacific-explorers.com",
        website="https://pacific-explorers.com",
    ),
    "agency-003": AgencyCreate(
        name="Volcano Discovery Tours",
        description="Volcano hiking and geological tours.",
        address="789 Kilauea Ave, Hilo, HI 96720",
        phone="+1-808-555-0300",
        email="info@volcano-discovery.com",
        website="https://volcano-discovery.com",
    ),
}

AGENTS: dict[str, AgentCreate] = {
    "agent-001": AgentCreate(
        name="John Doe",
        email="john@hawaii-tours.com",
        phone="+1-808-555-0101",
        bio="Tour guide with 5+ years in Hawaii tourism.",
        languages=["English", "Korean"],
        specialties=["Hiking", "Snorkeling", "Cultural Tours"],
        hourly_rate=25.0,
        agency_id="agency-001",
    ),
    "agent-002": AgentCreate(
        name="Sarah Kim",
        email="sarah@hawaii-tours.com",
        phone="+1-808-555-0102",
        bio="Certified diving instructor.",
        languages=["English", "Japanese"],
        specialties=["Scuba Diving", "Swimming", "Marine Life"],
        hourly_rate=30.0,
        max_hours_per_day=6,
        agency_id="agency-002",
    ),
    "agent-003": AgentCreate(
        name="Mike Johnson",
        email="mike@hawaii-tours.com",
        phone="+1-808-555-0103",
        bio="Volcano hiking and adventure sports specialist.",
        languages=["English"],
        specialties=["Volcano Hiking", "Rock Climbing"],
        hourly_rate=35.0,
        agency_id="agency-003",
    ),
}

ACTIVITIES: dict[str, ActivityCreate] = {
    "activity-001": ActivityCreate(
        title_en="Sunset Beach Walk",
        title_ko="일몰 해변 산책",
        description_en="Sunset walk along Waikiki Beach with local history.",
        price_usd=45.0,
        duration_minutes=90,
        max_participants=15,
        min_participants=2,
        location="Waikiki Beach",
        category="Beach Activities",
        tags=["sunset", "walking", "scenic"],
        daily_schedules=_every_day("1", [("17:00", "18:30"), ("18:00", "19:30")], 15),
    ),
    "activity-002": ActivityCreate(
        title_en="Volcano Hiking Adventure",
        title_ko="화산 하이킹 모험",
        description_en="Guided hike through Hawaii Volcanoes National Park.",
        price_usd=120.0,
        duration_minutes=240,
        max_participants=8,
        min_participants=4,
        location="Hawaii Volcanoes National Park",
        category="Adventure",
        tags=["hiking", "volcano", "nature"],
        daily_schedules=_every_day("2", [("08:00", "12:00")], 8),
    ),
    "activity-003": ActivityCreate(
        title_en="Snorkeling Paradise",
        title_ko="스노클링 천국",
        description_en="Coral reefs and tropical fish in Hanauma Bay.",
        price_usd=75.0,
        duration_minutes=120,
        max_participants=12,
        min_participants=3,
        location="Hanauma Bay",
        category="Water Sports",
        tags=["snorkeling", "marine life", "family-friendly"],
        daily_schedules=_every_day("3", [("09:00", "11:00"), ("13:00", "15:00")], 12),
    ),
}

BOOKINGS: dict[str, tuple[BookingCreate, BookingStatus]] = {
    "booking-001": (
        BookingCreate(
            activity_id="activity-001",
            agent_id="agent-001",
            customer_name="Alice Johnson",
            customer_email="alice@example.com",
            customer_phone="+1-555-0101",
            participants=2,
            start_time=datetime(2025, 9, 1, 17, 0),
            end_time=datetime(2025, 9, 1, 18, 30),
            total_price_usd=90.0,
            notes="First-time visitors",
        ),
        BookingStatus.CONFIRMED,
    ),
    "booking-002": (
        BookingCreate(
            activity_id="activity-003",
            agent_id="agent-002",
            customer_name="Bob Smith",
            customer_email="bob@example.com",
            participants=3,
            start_time=datetime(2025, 9, 2, 9, 0),
            end_time=datetime(2025, 9, 2, 11, 0),
            total_price_usd=225.0,
            notes="Family with children, prefer morning slots",
        ),
        BookingStatus.CONFIRMED,
    ),
    "booking-003": (
        BookingCreate(
            activity_id="activity-002",
            agent_id="agent-003",
            customer_name="Carol Davis",
            customer_email="carol@example.com",
            participants=4,
            start_time=datetime(2025, 9, 3, 8, 0),
            end_time=datetime(2025, 9, 3, 12, 0),
            total_price_usd=480.0,
        ),
        BookingStatus.PENDING,
    ),
    "booking-004": (
        BookingCreate(
            activity_id="activity-001",
            agent_id="agent-001",
            customer_name="Eva Brown",
            customer_email="eva@example.com",
            participants=2,
            start_time=datetime(2025, 9, 5, 17, 0),
            end_time=datetime(2025, 9, 5, 18, 30),
            total_price_usd=90.0,
            notes="Cancelled due to weather conditions",
        ),
        BookingStatus.CANCELLED,
    ),
}


async def seed_repository(repo: Repository) -> None:
    """Load the demo agencies, agents, activities and bookings."""
    for agency_id, agency in AGENCIES.items():
        await repo.create_agency(agency, entity_id=agency_id)
    for agent_id, agent in AGENTS.items():
        await repo.create_agent(agent, entity_id=agent_id)
    for activity_id, activity in ACTIVITIES.items():
        await repo.create_activity(activity, entity_id=activity_id)
    for booking_id, (booking, status) in BOOKINGS.items():
        await repo.create_booking(booking, status=status, entity_id=booking_id)
    logger.info("Seeded repository with mock data: %s", await repo.stats())
