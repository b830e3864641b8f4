"""Health reporting: database reachability plus auto-save and relay counters."""

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..schemas.common import HealthCheckResponse
from .autosave import AutoSaveCoordinator
from .interfaces import IHealthService
from .relay import Relay


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class HealthService(IHealthService):
    """Reports whether notes can be persisted right now.

    The coordinator and relay are optional so the database probe can be
    used on its own.
    """

    def __init__(
        self,
        session: AsyncSession,
        coordinator: Optional[AutoSaveCoordinator] = None,
        relay: Optional[Relay] = None,
    ):
        self.session = session
        self.coordinator = coordinator
        self.relay = relay
        self.settings = get_settings()

    async def get_health_status(self) -> HealthCheckResponse:
        database = await self.check_database_health()
        return HealthCheckResponse(
            # pending edits survive a short outage in memory, but nothing is written
            status="healthy" if database["connected"] else "unhealthy",
            timestamp=datetime.now(timezone.utc),
            version=self.settings.app_version,
            checks={"database": database},
            details=self.get_runtime_details(),
        )

    async def check_database_health(self) -> Dict[str, Any]:
        """Round-trip a SELECT 1 through the request session."""
        started = time.perf_counter()
        try:
            result = await self.session.execute(text("SELECT 1"))
            result.scalar()
        except Exception as e:
            return {"connected": False, "status": "unhealthy", "error": str(e), "response_time_ms": 0.0}
        return {"connected": True, "status": "healthy", "response_time_ms": _elapsed_ms(started)}

    def get_runtime_details(self) -> Dict[str, Any]:
        """Unsaved notes held in memory and open realtime sockets."""
        return {
            "pending_notes": self.coordinator.pending_count if self.coordinator else None,
            "live_connections": self.relay.connection_count if self.relay else None,
            "autosave_delay_seconds": self.settings.autosave_delay_seconds,
        }
