"""Health check endpoint."""

import os
from datetime import UTC, datetime

from fastapi import APIRouter

from lumina.api.models.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    summary="Health check",
    response_model=HealthResponse,
)
async def health() -> HealthResponse:
    """Report that the API process is up."""
    return HealthResponse(
        environment=os.getenv("ENVIRONMENT", "dev"),
        timestamp=datetime.now(UTC),
    )
