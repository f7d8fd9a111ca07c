"""
Agent (staff) endpoints.
"""

from fastapi import APIRouter, Query, Request, Response, status

from tourbooking.dependencies import Pagination, RepositoryDep, paginate
from tourbooking.errors import ConflictError, NotFoundError
from tourbooking.models import Agent, AgentCreate, AgentUpdate, ListResponse
from tourbooking.rate_limit import WRITE, limiter

router = APIRouter(prefix="/api/agents", tags=["agents"])


@router.get(
    "",
    response_model=ListResponse[Agent],
    operation_id="listAgents",
    summary="List agents",
)
async def list_agents(
    repo: RepositoryDep,
    pagination: Pagination,
    agency_id: str | None = Query(None),
    is_active: bool | None = Query(None),
    search: str | None = Query(None, description="Matches name, email and bio"),
) -> ListResponse[Agent]:
    items = await repo.list_agents(agency_id=agency_id, is_active=is_active, search=search)
    return paginate(items, pagination)


@router.post(
    "",
    response_model=Agent,
    status_code=status.HTTP_201_CREATED,
    operation_id="createAgent",
    summary="Create an agent",
)
@limiter.limit(WRITE)
async def create_agent(request: Request, body: AgentCreate, repo: RepositoryDep) -> Agent:
    if body.agency_id and await repo.get_agency(body.agency_id) is None:
        raise NotFoundError("Agency not found")
    if await repo.email_exists(body.email):
        raise ConflictError("Email already exists")
    return await repo.create_agent(body)


@router.get(
    "/{agent_id}",
    response_model=Agent,
    operation_id="getAgent",
    summary="Get an agent",
)
async def get_agent(agent_id: str, repo: RepositoryDep) -> Agent:
    agent = await repo.get_agent(agent_id)
    if agent is None:
        raise NotFoundError("Agent not found")
    return agent


@router.put(
    "/{agent_id}",
    response_model=Agent,
    operation_id="updateAgent",
    summary="Update an agent",
)
@limiter.limit(WRITE)
async def update_agent(
    request: Request, agent_id: str, body: AgentUpdate, repo: RepositoryDep
) -> Agent:
    if await repo.get_agent(agent_id) is None:
        raise NotFoundError("Agent not found")
    if body.agency_id and await repo.get_agency(body.agency_id) is None:
        raise NotFoundError("Agency not found")
    if body.email and await repo.email_exists(body.email, exclude_id=agent_id):
        raise ConflictError("Email already exists")
    updated = await repo.update_agent(agent_id, body.model_dump(exclude_unset=True))
    if updated is None:
        raise NotFoundError("Agent not found")
    return updated


@router.delete(
    "/{agent_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="deleteAgent",
    summary="Delete an agent",
)
@limiter.limit(WRITE)
async def delete_agent(request: Request, agent_id: str, repo: RepositoryDep) -> Response:
    if not await repo.delete_agent(agent_id):
        raise NotFoundError("Agent not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
