"""Health check API endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.common import HealthCheckResponse
from ..core.services import AutoSaveCoordinator, HealthService, Relay
from ..database import get_db_session
from ..dependencies import get_coordinator, get_relay

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/", response_model=HealthCheckResponse)
async def health_check(
    session: AsyncSession = Depends(get_db_session),
    coordinator: AutoSaveCoordinator = Depends(get_coordinator),
    relay: Relay = Depends(get_relay),
):
    """Get overall system health status."""
    health_service = HealthService(session, coordinator, relay)
    return await health_service.get_health_status()


@router.get("/database", response_model=Dict[str, Any])
async def database_health(session: AsyncSession = Depends(get_db_session)):
    """Check database connectivity."""
    health_service = HealthService(session)
    return await health_service.check_database_health()
