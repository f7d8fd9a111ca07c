"""
Agency unavailable-schedule endpoints – whole-day blackouts for every
agent of an agency.
"""

from fastapi import APIRouter, Query, Request, Response, status

from tourbooking.dependencies import BlackoutDep, Pagination, RepositoryDep, paginate
from tourbooking.errors import NotFoundError
from tourbooking.models import (
    AgencyUnavailableSchedule,
    AgencyUnavailableScheduleCreate,
    AgencyUnavailableScheduleUpdate,
    ListResponse,
    parse_iso_date,
)
from tourbooking.rate_limit import WRITE, limiter

router = APIRouter(prefix="/api/agency-unavailable-schedules", tags=["agency-schedules"])


def _optional_date(value: str | None):
    return parse_iso_date(value) if value else None


@router.get(
    "",
    response_model=ListResponse[AgencyUnavailableSchedule],
    operation_id="listAgencyUnavailableSchedules",
    summary="List agency unavailable schedules",
)
async def list_agency_schedules(
    repo: RepositoryDep,
    pagination: Pagination,
    agency_id: str | None = Query(None),
    date: str | None = Query(None, description="Exact date (YYYY-MM-DD)"),
    date_from: str | None = Query(None, description="Earliest date (YYYY-MM-DD)"),
    date_to: str | None = Query(None, description="Latest date (YYYY-MM-DD)"),
    is_active: bool | None = Query(None),
    search: str | None = Query(None, description="Matches the reason"),
) -> ListResponse[AgencyUnavailableSchedule]:
    items = await repo.list_agency_schedules(
        agency_id=agency_id,
        on_date=_optional_date(date),
        date_from=_optional_date(date_from),
        date_to=_optional_date(date_to),
        is_active=is_active,
        search=search,
    )
    return paginate(items, pagination)


@router.post(
    "",
    response_model=AgencyUnavailableSchedule,
    status_code=status.HTTP_201_CREATED,
    operation_id="createAgencyUnavailableSchedule",
    summary="Block a date for an agency",
)
@limiter.limit(WRITE)
async def create_agency_schedule(
    request: Request, body: AgencyUnavailableScheduleCreate, blackouts: BlackoutDep
) -> AgencyUnavailableSchedule:
    return await blackouts.create_agency_schedule(body)


@router.get(
    "/{schedule_id}",
    response_model=AgencyUnavailableSchedule,
    operation_id="getAgencyUnavailableSchedule",
    summary="Get an agency unavailable schedule",
)
async def get_agency_schedule(schedule_id: str, repo: RepositoryDep) -> AgencyUnavailableSchedule:
    schedule = await repo.get_agency_schedule(schedule_id)
    if schedule is None:
        raise NotFoundError("Agency unavailable schedule not found")
    return schedule


@router.put(
    "/{schedule_id}",
    response_model=AgencyUnavailableSchedule,
    operation_id="updateAgencyUnavailableSchedule",
    summary="Update an agency unavailable schedule",
)
@limiter.limit(WRITE)
async def update_agency_schedule(
    request: Request,
    schedule_id: str,
    body: AgencyUnavailableScheduleUpdate,
    blackouts: BlackoutDep,
) -> AgencyUnavailableSchedule:
    return await blackouts.update_agency_schedule(schedule_id, body)


@router.delete(
    "/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="deleteAgencyUnavailableSchedule",
    summary="Delete an agency unavailable schedule",
)
@limiter.limit(WRITE)
async def delete_agency_schedule(
    request: Request, schedule_id: str, blackouts: BlackoutDep
) -> Response:
    await blackouts.delete_agency_schedule(schedule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
