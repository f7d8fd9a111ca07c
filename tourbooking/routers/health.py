"""
Health check endpoint.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from tourbooking import __version__
from tourbooking.dependencies import RepositoryDep
from tourbooking.models import HealthResponse

router = APIRouter(prefix="/api", tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    operation_id="getHealth",
    summary="Health check",
)
async def get_health(repo: RepositoryDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        stats=await repo.stats(),
    )
