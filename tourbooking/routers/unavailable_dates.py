"""
Blackout date endpoints for activities and agents.

    /api/activities/{id}/unavailable-dates
    /api/agents/{id}/unavailable-dates

Agency-wide blackouts are managed through ``/api/agency-unavailable-schedules``.
"""

from enum import StrEnum

from fastapi import APIRouter, Query, Request, status

from tourbooking.dependencies import BlackoutDep
from tourbooking.errors import DuplicateDateError
from tourbooking.models import (
    BlackoutEntity,
    UnavailableDateRequest,
    UnavailableDatesReplace,
    UnavailableDatesResponse,
    parse_iso_date,
)
from tourbooking.rate_limit import WRITE, limiter
from tourbooking.services.blackout import BlackoutRegistry

router = APIRouter(prefix="/api", tags=["unavailable-dates"])


class EntityCollection(StrEnum):
    ACTIVITIES = "activities"
    AGENTS = "agents"


_ENTITY_TYPES = {
    EntityCollection.ACTIVITIES: BlackoutEntity.ACTIVITY,
    EntityCollection.AGENTS: BlackoutEntity.AGENT,
}


async def _response(
    blackouts: BlackoutRegistry, entity_type: BlackoutEntity, entity_id: str, **extra
) -> UnavailableDatesResponse:
    dates = await blackouts.list_dates(entity_type, entity_id)
    return UnavailableDatesResponse(
        entity_type=entity_type,
        entity_id=entity_id,
        unavailable_dates=dates,
        total_dates=len(dates),
        **extra,
    )


@router.get(
    "/{collection}/{entity_id}/unavailable-dates",
    response_model=UnavailableDatesResponse,
    operation_id="listUnavailableDates",
    summary="List blackout dates of an activity or agent",
)
async def list_unavailable_dates(
    collection: EntityCollection, entity_id: str, blackouts: BlackoutDep
) -> UnavailableDatesResponse:
    return await _response(blackouts, _ENTITY_TYPES[collection], entity_id)


@router.post(
    "/{collection}/{entity_id}/unavailable-dates",
    response_model=UnavailableDatesResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="addUnavailableDate",
    summary="Block one date",
)
@limiter.limit(WRITE)
async def add_unavailable_date(
    request: Request,
    collection: EntityCollection,
    entity_id: str,
    body: UnavailableDateRequest,
    blackouts: BlackoutDep,
) -> UnavailableDatesResponse:
    entity_type = _ENTITY_TYPES[collection]
    if not await blackouts.add_date(entity_type, entity_id, body.date):
        raise DuplicateDateError("Date is already in unavailable dates list")
    return await _response(blackouts, entity_type, entity_id, added_date=parse_iso_date(body.date))


@router.put(
    "/{collection}/{entity_id}/unavailable-dates",
    response_model=UnavailableDatesResponse,
    operation_id="replaceUnavailableDates",
    summary="Replace all blackout dates",
)
@limiter.limit(WRITE)
async def replace_unavailable_dates(
    request: Request,
    collection: EntityCollection,
    entity_id: str,
    body: UnavailableDatesReplace,
    blackouts: BlackoutDep,
) -> UnavailableDatesResponse:
    entity_type = _ENTITY_TYPES[collection]
    await blackouts.set_dates(entity_type, entity_id, body.unavailable_dates)
    return await _response(blackouts, entity_type, entity_id)


@router.delete(
    "/{collection}/{entity_id}/unavailable-dates",
    response_model=UnavailableDatesResponse,
    operation_id="removeUnavailableDate",
    summary="Unblock one date",
)
@limiter.limit(WRITE)
async def remove_unavailable_date(
    request: Request,
    collection: EntityCollection,
    entity_id: str,
    blackouts: BlackoutDep,
    date: str = Query(..., description="Date to unblock (YYYY-MM-DD)"),
) -> UnavailableDatesResponse:
    entity_type = _ENTITY_TYPES[collection]
    await blackouts.remove_date(entity_type, entity_id, date)
    return await _response(blackouts, entity_type, entity_id, removed_date=parse_iso_date(date))
