"""Health check routes."""

from fastapi import APIRouter
from pydantic import BaseModel

import observatory

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str


@router.get("/health")
async def health() -> HealthResponse:
    """Liveness check. Never touches upstream providers."""
    return HealthResponse(status="ok", version=observatory.__version__)
