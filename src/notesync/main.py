"""NoteSync ASGI app: HTTP routes, the /ws relay and the shutdown drain."""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import health_router, notes_router, realtime_router
from .config import get_settings
from .core.logging import LoggingMiddleware, get_logger, setup_logging
from .core.schemas.notes import NoteUrlResponse
from .core.services import AutoSaveCoordinator
from .database import create_tables
from .dependencies import get_coordinator
from .security import generate_note_id, get_cipher

setup_logging()
logger = get_logger("main")

settings = get_settings()


def _coordinator_for(app: FastAPI) -> AutoSaveCoordinator:
    # honour test overrides so shutdown drains the coordinator requests used
    return app.dependency_overrides.get(get_coordinator, get_coordinator)()


async def _drain_pending(app: FastAPI) -> None:
    coordinator = _coordinator_for(app)
    pending = coordinator.pending_count
    result = await coordinator.drain_all()
    logger.info(
        "Pending notes drained",
        extra={"pending": pending, "flushed": len(result.flushed), "failed": len(result.failed)},
    )
    if result.failed:
        logger.error(
            "Some pending notes could not be saved on shutdown",
            extra={"failed_note_ids": sorted(result.failed)},
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting NoteSync",
        extra={"version": settings.app_version, "environment": settings.environment, "debug": settings.debug},
    )

    # a bad ENCRYPTION_KEY stops the boot here rather than on the first save
    get_cipher()

    # tests run against their own SQLite engine
    if os.getenv("NOTESYNC_SKIP_LIFESPAN_DB") == "1":
        logger.info("Skipping DB table creation due to NOTESYNC_SKIP_LIFESPAN_DB=1")
    else:
        try:
            await create_tables()
        except Exception as e:
            logger.error("Failed to create database tables", exc_info=e)
            raise
        logger.info("Database tables created/verified")

    yield

    logger.info("Shutting down NoteSync, flushing unsaved notes")
    await _drain_pending(app)


app = FastAPI(
    title="NoteSync",
    description="Encrypted notes with delayed auto-save and live sync",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

for router in (notes_router, health_router):
    app.include_router(router, prefix="/api")
app.include_router(realtime_router)


@app.get("/", response_model=NoteUrlResponse)
async def new_note_url():
    """Hand out a fresh random note id; nothing is stored until first use."""
    return NoteUrlResponse(note_url=generate_note_id(settings.note_id_length))


# Unprefixed liveness probe
@app.get("/health")
async def basic_health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("notesync.main:app", host=settings.host, port=settings.port, reload=settings.reload)
