import asyncio
import sys
from pathlib import Path

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

# make the notesync package importable without an install
project_root = Path(__file__).resolve().parents[1]
src_path = str(project_root / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

# real env vars win over .env entries
load_dotenv(dotenv_path=project_root / ".env", override=False)

from notesync.config import Settings  # noqa: E402
from notesync.core.models import BaseModel  # noqa: E402

target_metadata = BaseModel.metadata


def _database_url() -> str:
    """alembic.ini sqlalchemy.url if set, otherwise the app's DATABASE_URL setting."""
    url = context.config.get_main_option("sqlalchemy.url") or Settings().database_url
    if not url.startswith("postgresql"):
        raise ValueError(f"Migrations target PostgreSQL only. Got: {url}")
    return url


def _configure_and_run(**options) -> None:
    context.configure(target_metadata=target_metadata, compare_type=True, **options)
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure_and_run(connection=connection)


async def _run_async(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(_run_sync)
    await engine.dispose()


def run_migrations_online() -> None:
    url = _database_url()
    if url.startswith("postgresql+asyncpg"):
        asyncio.run(_run_async(url))
        return

    engine = engine_from_config({"sqlalchemy.url": url}, prefix="sqlalchemy.", poolclass=pool.NullPool)
    with engine.connect() as connection:
        _run_sync(connection)


def run_migrations_offline() -> None:
    # emits SQL for the notes table without a live database
    _configure_and_run(url=_database_url(), literal_binds=True)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
