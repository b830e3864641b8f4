import pytest

from src.notesync.core.services.autosave import AutoSaveCoordinator
from src.notesync.core.services.health_service import HealthService
from src.notesync.core.services.relay import Relay


class FakeScalarResult:
    def __init__(self, scalar_value):
        self._scalar_value = scalar_value
    def scalar(self):
        return self._scalar_value


class FakeSession:
    def __init__(self, ok=True):
        self.ok = ok
        self.executed = []
    async def execute(self, stmt):
        self.executed.append(stmt)
        if self.ok:
            return FakeScalarResult(1)
        raise RuntimeError("db down")


class FakeConnection:
    async def send_json(self, data):
        pass


def unused_store_factory():
    raise AssertionError("health checks never open a store")


@pytest.mark.asyncio
async def test_get_health_status_all_ok():
    session = FakeSession(ok=True)
    svc = HealthService(session)

    resp = await svc.get_health_status()
    assert resp.status == "healthy"
    assert resp.checks["database"]["connected"] is True
    assert resp.checks["database"]["response_time_ms"] >= 0
    assert len(session.executed) == 1


@pytest.mark.asyncio
async def test_get_health_status_db_down():
    svc = HealthService(FakeSession(ok=False))

    resp = await svc.get_health_status()
    assert resp.status == "unhealthy"
    assert resp.checks["database"]["connected"] is False
    assert resp.checks["database"]["error"] == "db down"


@pytest.mark.asyncio
async def test_runtime_details_report_pending_and_connections():
    coordinator = AutoSaveCoordinator(unused_store_factory, delay_seconds=60)
    relay = Relay()
    relay.register(FakeConnection())
    coordinator.record_edit("noteA", "h", "c")

    svc = HealthService(FakeSession(), coordinator=coordinator, relay=relay)
    resp = await svc.get_health_status()

    assert resp.details["pending_notes"] == 1
    assert resp.details["live_connections"] == 1
    assert resp.details["autosave_delay_seconds"] == svc.settings.autosave_delay_seconds

    await coordinator.discard("noteA")


@pytest.mark.asyncio
async def test_runtime_details_without_coordinator_or_relay():
    svc = HealthService(FakeSession())
    details = svc.get_runtime_details()
    assert details["pending_notes"] is None
    assert details["live_connections"] is None
