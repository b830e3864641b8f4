"""API routers for NoteSync."""

from .health import router as health_router
from .notes import router as notes_router
from .realtime import router as realtime_router

__all__ = ["notes_router", "realtime_router", "health_router"]
