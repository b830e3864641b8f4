"""Shared pytest fixtures configured to use SQLite in-memory for unit tests."""

import logging
import os
from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

# Tell app lifespan to skip real DB init
os.environ.setdefault("NOTESYNC_SKIP_LIFESPAN_DB", "1")

from src.notesync.config import Settings, get_settings
from src.notesync.core.models.base import BaseModel
from src.notesync.core.repositories.note_repository import NoteStore
from src.notesync.core.services.autosave import AutoSaveCoordinator
from src.notesync.core.services.relay import Relay
from src.notesync.database import get_db_session
from src.notesync.dependencies import get_coordinator, get_relay
from src.notesync.main import app
from src.notesync.security.cipher import FieldCipher

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)

TEST_KEY_HEX = "00112233445566778899aabbccddeeff" * 2


@pytest.fixture(scope="session")
def test_settings():
    """Override settings for testing using SQLite in-memory DB."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        encryption_key=TEST_KEY_HEX,
        autosave_delay_seconds=0.05,
        debug=True,
    )


@pytest.fixture
def cipher():
    return FieldCipher(bytes.fromhex(TEST_KEY_HEX))


@pytest.fixture
async def test_engine(test_settings):
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        test_settings.database_url,
        echo=False,
        poolclass=StaticPool,  # keep the same memory DB across connections
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def file_session_maker(tmp_path):
    """Sessions on separate connections to one SQLite file, for concurrent writers."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest.fixture
async def test_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def store_factory(session_maker, cipher):
    """Opens a NoteStore on its own session, like the production factory."""

    @asynccontextmanager
    async def _scope():
        async with session_maker() as session:
            yield NoteStore(session, cipher)

    return _scope


@pytest.fixture
async def coordinator(store_factory, test_settings):
    coord = AutoSaveCoordinator(store_factory, delay_seconds=test_settings.autosave_delay_seconds)
    yield coord
    # never leave timers running past the test's event loop
    await coord.drain_all()


@pytest.fixture
def relay():
    return Relay()


@pytest.fixture
def test_app(session_maker, store_factory, test_settings, relay, cipher, monkeypatch):
    """FastAPI app wired to the in-memory DB, a fresh coordinator and a fresh relay."""
    import src.notesync.core.services.note_service as ns

    # the service encrypts with the test key
    monkeypatch.setattr(ns, "get_cipher", lambda: cipher, raising=True)

    async def _override_get_db():
        async with session_maker() as session:
            yield session

    coord = AutoSaveCoordinator(store_factory, delay_seconds=60)

    app.dependency_overrides[get_db_session] = _override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_coordinator] = lambda: coord
    app.dependency_overrides[get_relay] = lambda: relay
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Test client running the app lifespan, so shutdown drains pending notes."""
    with TestClient(test_app) as test_client:
        yield test_client
