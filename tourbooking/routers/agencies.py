"""
Agency endpoints.
"""

from fastapi import APIRouter, Query, Request, Response, status

from tourbooking.dependencies import Pagination, RepositoryDep, paginate
from tourbooking.errors import ConflictError, NotFoundError
from tourbooking.models import Agency, AgencyCreate, AgencyUpdate, ListResponse
from tourbooking.rate_limit import WRITE, limiter

router = APIRouter(prefix="/api/agencies", tags=["agencies"])


@router.get(
    "",
    response_model=ListResponse[Agency],
    operation_id="listAgencies",
    summary="List agencies",
)
async def list_agencies(
    repo: RepositoryDep,
    pagination: Pagination,
    is_active: bool | None = Query(None),
    search: str | None = Query(None, description="Matches name, description and email"),
) -> ListResponse[Agency]:
    items = await repo.list_agencies(is_active=is_active, search=search)
    return paginate(items, pagination)


@router.post(
    "",
    response_model=Agency,
    status_code=status.HTTP_201_CREATED,
    operation_id="createAgency",
    summary="Create an agency",
)
@limiter.limit(WRITE)
async def create_agency(request: Request, body: AgencyCreate, repo: RepositoryDep) -> Agency:
    return await repo.create_agency(body)


@router.get(
    "/{agency_id}",
    response_model=Agency,
    operation_id="getAgency",
    summary="Get an agency",
)
async def get_agency(agency_id: str, repo: RepositoryDep) -> Agency:
    agency = await repo.get_agency(agency_id)
    if agency is None:
        raise NotFoundError("Agency not found")
    return agency


@router.put(
    "/{agency_id}",
    response_model=Agency,
    operation_id="updateAgency",
    summary="Update an agency",
)
@limiter.limit(WRITE)
async def update_agency(
    request: Request, agency_id: str, body: AgencyUpdate, repo: RepositoryDep
) -> Agency:
    updated = await repo.update_agency(agency_id, body.model_dump(exclude_unset=True))
    if updated is None:
        raise NotFoundError("Agency not found")
    return updated


@router.delete(
    "/{agency_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="deleteAgency",
    summary="Delete an agency",
)
@limiter.limit(WRITE)
async def delete_agency(request: Request, agency_id: str, repo: RepositoryDep) -> Response:
    if await repo.get_agency(agency_id) is None:
        raise NotFoundError("Agency not found")
    if await repo.list_agents(agency_id=agency_id):
        raise ConflictError("Agency still has agents assigned")
    await repo.delete_agency(agency_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
