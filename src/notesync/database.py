# Database connection setup
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .config import get_settings
from .core.models.base import BaseModel
from .core.repositories.note_repository import NoteStore
from .security import get_cipher

# Get settings
settings = get_settings()

# Create async engine using settings
engine = create_async_engine(settings.database_url, echo=settings.database_echo)

# Session factory
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db_session():
    """Get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


def make_store_factory(session_factory: async_sessionmaker = AsyncSessionLocal):
    """Build a factory opening a NoteStore on a fresh session.

    Background flushes outlive the request that scheduled them, so they
    cannot borrow a request-scoped session.
    """

    @asynccontextmanager
    async def store_scope() -> AsyncIterator[NoteStore]:
        async with session_factory() as session:
            yield NoteStore(session, get_cipher())

    return store_scope


async def create_tables():
    """Create all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)
