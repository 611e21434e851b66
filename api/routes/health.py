"""
Module 07 - Health Check Route

Simple health check endpoint for liveness probes.
"""

from fastapi import APIRouter, Request

from api.models.responses import HealthResponse
from core.schemas.versioning import API_VERSION


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Returns service status for liveness probes. A missing tree does not
    fail the check; proof endpoints report it as 503.
    """
    return HealthResponse(
        ok=True,
        service="allowlist-proof-api",
        version=API_VERSION,
        tree_loaded=request.app.state.proof_service is not None,
    )


@router.get("/", response_model=HealthResponse)
async def root(request: Request) -> HealthResponse:
    """
    Root endpoint - same as health check.
    """
    return await health_check(request)
