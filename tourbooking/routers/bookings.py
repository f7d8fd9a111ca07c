"""
Booking endpoints.

Writes go through ``BookingService`` so every create / update is validated
against slot capacity and blackout dates before anything is stored.
"""

from fastapi import APIRouter, Query, Request, Response, status

from tourbooking.dependencies import (
    BookingServiceDep,
    Pagination,
    RepositoryDep,
    ValidatorDep,
    paginate,
)
from tourbooking.errors import NotFoundError
from tourbooking.models import (
    Booking,
    BookingCreate,
    BookingStatus,
    BookingStatusUpdate,
    BookingUpdate,
    BookingValidationRequest,
    BookingValidationResponse,
    ListResponse,
    parse_iso_date,
)
from tourbooking.rate_limit import VALIDATE, WRITE, limiter

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.get(
    "",
    response_model=ListResponse[Booking],
    operation_id="listBookings",
    summary="List bookings",
)
async def list_bookings(
    repo: RepositoryDep,
    pagination: Pagination,
    activity_id: str | None = Query(None),
    agent_id: str | None = Query(None),
    statuses: list[BookingStatus] | None = Query(
        None, alias="status", description="One or more statuses"
    ),
    date: str | None = Query(None, description="Start date (YYYY-MM-DD)"),
    date_from: str | None = Query(None, description="Earliest start date (YYYY-MM-DD)"),
    date_to: str | None = Query(None, description="Latest start date (YYYY-MM-DD)"),
    search: str | None = Query(None, description="Matches customer name and email"),
) -> ListResponse[Booking]:
    items = await repo.list_bookings(
        activity_id=activity_id,
        agent_id=agent_id,
        status=statuses or None,
        on_date=parse_iso_date(date) if date else None,
        date_from=parse_iso_date(date_from) if date_from else None,
        date_to=parse_iso_date(date_to) if date_to else None,
        search=search,
    )
    return paginate(items, pagination)


@router.post(
    "/validate",
    response_model=BookingValidationResponse,
    operation_id="validateBooking",
    summary="Check whether a booking could be created, without creating it",
)
@limiter.limit(VALIDATE)
async def validate_booking(
    request: Request,
    body: BookingValidationRequest,
    repo: RepositoryDep,
    validator: ValidatorDep,
) -> BookingValidationResponse:
    if await repo.get_activity(body.activity_id) is None:
        raise NotFoundError("Activity not found")
    if body.agent_id is not None and await repo.get_agent(body.agent_id) is None:
        raise NotFoundError("Agent not found")
    return await validator.preflight(body)


@router.post(
    "",
    response_model=Booking,
    status_code=status.HTTP_201_CREATED,
    operation_id="createBooking",
    summary="Create a booking",
)
@limiter.limit(WRITE)
async def create_booking(
    request: Request, body: BookingCreate, service: BookingServiceDep
) -> Booking:
    return await service.create(body)


@router.get(
    "/{booking_id}",
    response_model=Booking,
    operation_id="getBooking",
    summary="Get a booking",
)
async def get_booking(booking_id: str, repo: RepositoryDep) -> Booking:
    booking = await repo.get_booking(booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


@router.put(
    "/{booking_id}",
    response_model=Booking,
    operation_id="updateBooking",
    summary="Update a booking",
)
@limiter.limit(WRITE)
async def update_booking(
    request: Request, booking_id: str, body: BookingUpdate, service: BookingServiceDep
) -> Booking:
    return await service.update(booking_id, body)


@router.patch(
    "/{booking_id}/status",
    response_model=Booking,
    operation_id="updateBookingStatus",
    summary="Move a booking through its status lifecycle",
)
@limiter.limit(WRITE)
async def update_booking_status(
    request: Request, booking_id: str, body: BookingStatusUpdate, service: BookingServiceDep
) -> Booking:
    return await service.change_status(booking_id, body.status)


@router.delete(
    "/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="deleteBooking",
    summary="Delete a booking",
)
@limiter.limit(WRITE)
async def delete_booking(
    request: Request, booking_id: str, service: BookingServiceDep
) -> Response:
    await service.delete(booking_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
