"""Health check endpoint — used by the platform healthcheck and monitoring."""

from __future__ import annotations

from fastapi import APIRouter

from gsl_cms.api.v1.deps import AppSettings
from gsl_cms.schemas.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/healthz/", response_model=HealthResponse)
async def health_check(settings: AppSettings) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        environment=settings.app_env,
        record_backend=settings.record_backend,
    )
