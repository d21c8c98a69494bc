"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from task_tracker_service.core.state import get_app_state
from task_tracker_service.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report liveness. Needs no credential, so it exposes no tenant data."""
    state = get_app_state()
    return HealthResponse(
        status="ok",
        uptime_seconds=state.uptime_seconds,
        started_at=state.started_at,
    )
