"""
Activity endpoints – catalogue CRUD plus per-date slot availability.
"""

from datetime import timedelta

from fastapi import APIRouter, Query, Request, Response, status

from tourbooking.dependencies import (
    ActivityLocksDep,
    BlackoutDep,
    CalculatorDep,
    Pagination,
    RepositoryDep,
    paginate,
)
from tourbooking.errors import NotFoundError, ValidationFailedError
from tourbooking.models import (
    Activity,
    ActivityAvailabilityResponse,
    ActivityCreate,
    ActivityUpdate,
    BlackoutEntity,
    ListResponse,
    UtilizationStats,
    parse_iso_date,
)
from tourbooking.rate_limit import WRITE, limiter
from tourbooking.repository import Repository
from tourbooking.services.availability import summarize

router = APIRouter(prefix="/api/activities", tags=["activities"])

MAX_UTILIZATION_DAYS = 366


async def get_activity_or_404(repo: Repository, activity_id: str) -> Activity:
    activity = await repo.get_activity(activity_id)
    if activity is None:
        raise NotFoundError("Activity not found")
    return activity


@router.get(
    "",
    response_model=ListResponse[Activity],
    operation_id="listActivities",
    summary="List activities",
)
async def list_activities(
    repo: RepositoryDep,
    pagination: Pagination,
    is_active: bool | None = Query(None),
    search: str | None = Query(None, description="Matches titles, description and location"),
    category: str | None = Query(None),
) -> ListResponse[Activity]:
    items = await repo.list_activities(is_active=is_active, search=search, category=category)
    return paginate(items, pagination)


@router.post(
    "",
    response_model=Activity,
    status_code=status.HTTP_201_CREATED,
    operation_id="createActivity",
    summary="Create an activity",
)
@limiter.limit(WRITE)
async def create_activity(request: Request, body: ActivityCreate, repo: RepositoryDep) -> Activity:
    return await repo.create_activity(body)


@router.get(
    "/{activity_id}",
    response_model=Activity,
    operation_id="getActivity",
    summary="Get an activity",
)
async def get_activity(activity_id: str, repo: RepositoryDep) -> Activity:
    return await get_activity_or_404(repo, activity_id)


@router.put(
    "/{activity_id}",
    response_model=Activity,
    operation_id="updateActivity",
    summary="Update an activity",
)
@limiter.limit(WRITE)
async def update_activity(
    request: Request, activity_id: str, body: ActivityUpdate, repo: RepositoryDep
) -> Activity:
    updated = await repo.update_activity(activity_id, body.model_dump(exclude_unset=True))
    if updated is None:
        raise NotFoundError("Activity not found")
    return updated


@router.delete(
    "/{activity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="deleteActivity",
    summary="Delete an activity",
)
@limiter.limit(WRITE)
async def delete_activity(
    request: Request, activity_id: str, repo: RepositoryDep, locks: ActivityLocksDep
) -> Response:
    if not await repo.delete_activity(activity_id):
        raise NotFoundError("Activity not found")
    locks.discard(activity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{activity_id}/availability",
    response_model=ActivityAvailabilityResponse,
    operation_id="getActivityAvailability",
    summary="Slot availability of an activity on one date",
)
async def get_activity_availability(
    activity_id: str,
    repo: RepositoryDep,
    calculator: CalculatorDep,
    blackouts: BlackoutDep,
    date: str = Query(..., description="Date to check (YYYY-MM-DD)"),
    participants: int | None = Query(
        None, ge=1, description="Only list slots with room for this many participants"
    ),
) -> ActivityAvailabilityResponse:
    """
    Per-slot load for ``date``.

    The summary always covers every slot of the day; ``participants`` only
    narrows the listed slots. A blacked-out date lists no slots.
    """
    day = parse_iso_date(date)
    activity = await get_activity_or_404(repo, activity_id)
    if not activity.is_active:
        raise ValidationFailedError("Activity is not active")

    if await blackouts.is_date_blocked(BlackoutEntity.ACTIVITY, activity_id, day):
        return ActivityAvailabilityResponse(
            activity_id=activity_id, date=day, blocked=True, slots=[], summary=summarize([])
        )

    slots = await calculator.availability_for_date(activity_id, day)
    listed = slots
    if participants is not None:
        listed = [s for s in slots if s.is_available and s.remaining_capacity >= participants]
    return ActivityAvailabilityResponse(
        activity_id=activity_id, date=day, slots=listed, summary=summarize(slots)
    )


@router.get(
    "/{activity_id}/utilization",
    response_model=UtilizationStats,
    operation_id="getActivityUtilization",
    summary="Slot utilisation of an activity over a date range",
)
async def get_activity_utilization(
    activity_id: str,
    repo: RepositoryDep,
    calculator: CalculatorDep,
    start_date: str = Query(..., description="First date (YYYY-MM-DD)"),
    end_date: str = Query(..., description="Last date, inclusive (YYYY-MM-DD)"),
) -> UtilizationStats:
    start, end = parse_iso_date(start_date), parse_iso_date(end_date)
    if start > end:
        raise ValidationFailedError("start_date must not be after end_date")
    if end - start > timedelta(days=MAX_UTILIZATION_DAYS):
        raise ValidationFailedError(f"Date range may span at most {MAX_UTILIZATION_DAYS} days")
    await get_activity_or_404(repo, activity_id)
    return await calculator.utilization(activity_id, start, end)
