import logging
from typing import Annotated

from fastapi import Depends, Query, Request

from tourbooking.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from tourbooking.models import ListResponse, PaginationMeta
from tourbooking.repository import InMemoryRepository, Repository
from tourbooking.services.availability import AvailabilityCalculator
from tourbooking.services.blackout import BlackoutRegistry
from tourbooking.services.bookings import ActivityLocks, BookingService
from tourbooking.services.validator import BookingValidator

logger = logging.getLogger(__name__)


# ── Pagination ─────────────────────────────────────────────────────────────


class PaginationParams:
    def __init__(
        self,
        page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
        page_size: Annotated[
            int, Query(ge=1, le=MAX_PAGE_SIZE, description="Items per page")
        ] = DEFAULT_PAGE_SIZE,
    ):
        self.page = page
        self.page_size = page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def paginate(items: list, pagination: PaginationParams) -> ListResponse:
    total = len(items)
    start = pagination.offset
    end = start + pagination.page_size
    return ListResponse(
        items=items[start:end],
        meta=PaginationMeta(
            page=pagination.page,
            page_size=pagination.page_size,
            total_items=total,
            total_pages=max(1, -(-total // pagination.page_size)),
        ),
    )


Pagination = Annotated[PaginationParams, Depends()]


# ── Storage / services ─────────────────────────────────────────────────────


def get_repository(request: Request) -> Repository:
    repo = getattr(request.app.state, "repository", None)
    if repo is None:
        # Lifespan did not run (e.g. a bare ASGI mount); fall back to an empty store.
        logger.warning("No repository on app state, creating an empty one")
        repo = request.app.state.repository = InMemoryRepository()
    return repo


def get_activity_locks(request: Request) -> ActivityLocks:
    locks = getattr(request.app.state, "activity_locks", None)
    if locks is None:
        locks = request.app.state.activity_locks = ActivityLocks()
    return locks


RepositoryDep = Annotated[Repository, Depends(get_repository)]
ActivityLocksDep = Annotated[ActivityLocks, Depends(get_activity_locks)]


def get_blackout_registry(repo: RepositoryDep) -> BlackoutRegistry:
    return BlackoutRegistry(repo)


def get_availability_calculator(repo: RepositoryDep) -> AvailabilityCalculator:
    return AvailabilityCalculator(repo)


def get_booking_validator(repo: RepositoryDep) -> BookingValidator:
    return BookingValidator(repo)


def get_booking_service(
    repo: RepositoryDep,
    locks: ActivityLocksDep,
) -> BookingService:
    return BookingService(repo, locks)


BlackoutDep = Annotated[BlackoutRegistry, Depends(get_blackout_registry)]
CalculatorDep = Annotated[AvailabilityCalculator, Depends(get_availability_calculator)]
ValidatorDep = Annotated[BookingValidator, Depends(get_booking_validator)]
BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
