"""Tests for the in-memory repository."""

import pytest

from tourbooking.errors import ValidationFailedError
from tourbooking.models import AgencyUnavailableScheduleCreate, BookingStatus
from tourbooking.repository import InMemoryRepository
from tourbooking.mock_data import seed_repository
from tests.mocks.models import (
    AGENCY_ID,
    AGENT_ID,
    FRIDAY,
    KAYAK_ID,
    MONDAY,
    NEXT_MONDAY,
    SURFING_ID,
    at,
    make_booking,
)


class TestActivities:
    @pytest.mark.asyncio
    async def test_filters(self, repo):
        await repo.update_activity(KAYAK_ID, {"is_active": False})
        active = await repo.list_activities(is_active=True)
        assert [a.id for a in active] == [SURFING_ID]
        assert [a.id for a in await repo.list_activities(search="kayak")] == [KAYAK_ID]
        assert len(await repo.list_activities(category="Water Sports")) == 2

    @pytest.mark.asyncio
    async def test_newest_first(self, repo):
        ids = [a.id for a in await repo.list_activities()]
        assert ids == [KAYAK_ID, SURFING_ID]

    @pytest.mark.asyncio
    async def test_update_revalidates_merged_record(self, repo):
        with pytest.raises(ValidationFailedError):
            await repo.update_activity(SURFING_ID, {"min_participants": 20})
        assert (await repo.get_activity(SURFING_ID)).min_participants == 1

    @pytest.mark.asyncio
    async def test_update_bumps_timestamp(self, repo):
        before = await repo.get_activity(SURFING_ID)
        after = await repo.update_activity(SURFING_ID, {"title_en": "Surf School"})
        assert after.title_en == "Surf School"
        assert after.created_at == before.created_at
        assert after.updated_at >= before.updated_at

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, repo):
        assert await repo.update_activity("missing", {"title_en": "x"}) is None
        assert await repo.delete_activity("missing") is False


class TestBookings:
    @pytest.mark.asyncio
    async def test_filters(self, repo):
        friday = await repo.create_booking(
            make_booking(
                agent_id=AGENT_ID,
                customer_name="Friday Guest",
                start_time=at(FRIDAY, "09:00"),
                end_time=at(FRIDAY, "11:00"),
            ),
            status=BookingStatus.CANCELLED,
        )
        assert [b.id for b in await repo.list_bookings(agent_id=AGENT_ID)] == [friday.id]
        assert [b.id for b in await repo.list_bookings(on_date=FRIDAY)] == [friday.id]
        assert len(await repo.list_bookings(date_from=MONDAY, date_to=FRIDAY)) == 2
        assert await repo.list_bookings(date_from=NEXT_MONDAY) == []
        assert [b.id for b in await repo.list_bookings(status=BookingStatus.CANCELLED)] == [friday.id]
        assert len(
            await repo.list_bookings(status=[BookingStatus.CANCELLED, BookingStatus.CONFIRMED])
        ) == 2
        assert [b.id for b in await repo.list_bookings(search="friday")] == [friday.id]

    @pytest.mark.asyncio
    async def test_create_defaults_to_pending(self, repo):
        booking = await repo.create_booking(make_booking())
        assert booking.status == BookingStatus.PENDING
        assert booking.id


class TestAgents:
    @pytest.mark.asyncio
    async def test_email_exists_is_case_insensitive(self, repo):
        assert await repo.email_exists("KAI@northshore.example.com")
        assert not await repo.email_exists("kai@northshore.example.com", exclude_id=AGENT_ID)

    @pytest.mark.asyncio
    async def test_filter_by_agency(self, repo):
        agents = await repo.list_agents(agency_id=AGENCY_ID)
        assert [a.id for a in agents] == [AGENT_ID]


class TestAgencySchedules:
    @pytest.mark.asyncio
    async def test_filters(self, repo):
        await repo.create_agency_schedule(
            AgencyUnavailableScheduleCreate(agency_id=AGENCY_ID, date=FRIDAY, reason="Retreat")
        )
        await repo.create_agency_schedule(
            AgencyUnavailableScheduleCreate(agency_id=AGENCY_ID, date=MONDAY, is_active=False)
        )
        assert len(await repo.list_agency_schedules(agency_id=AGENCY_ID)) == 2
        assert len(await repo.list_agency_schedules(is_active=True)) == 1
        assert len(await repo.list_agency_schedules(on_date=MONDAY)) == 1
        assert len(await repo.list_agency_schedules(date_from=FRIDAY)) == 1
        assert len(await repo.list_agency_schedules(search="retreat")) == 1


class TestMaintenance:
    @pytest.mark.asyncio
    async def test_stats_and_reset(self, repo):
        stats = await repo.stats()
        assert stats["activities"] == 2
        assert stats["bookings"] == 1
        assert stats["agents"] == 2
        await repo.reset()
        assert set((await repo.stats()).values()) == {0}

    @pytest.mark.asyncio
    async def test_demo_seed(self):
        repo = InMemoryRepository()
        await seed_repository(repo)
        stats = await repo.stats()
        assert stats == {
            "activities": 3,
            "bookings": 4,
            "agencies": 3,
            "agents": 3,
            "agency_unavailable_schedules": 0,
        }
        sunset = await repo.get_activity("activity-001")
        assert sunset.title_en == "Sunset Beach Walk"
        assert len(sunset.daily_schedules) == 7
