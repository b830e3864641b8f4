"""
Service layer interfaces and implementations.
"""

from .interfaces import IHealthService, INoteService

from .autosave import AutoSaveCoordinator, DrainResult, PendingNote
from .health_service import HealthService
from .note_service import NoteService
from .relay import Relay

__all__ = [
    # Interfaces
    "INoteService",
    "IHealthService",

    # Implementations
    "AutoSaveCoordinator",
    "DrainResult",
    "PendingNote",
    "HealthService",
    "NoteService",
    "Relay",
]
