"""
Service interfaces for NoteSync.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ..schemas.common import HealthCheckResponse, SuccessResponse
from ..schemas.notes import NoteResponse, NoteSaveRequest, NoteSummary


class INoteService(ABC):
    """Note lifecycle operations exposed over HTTP."""

    @abstractmethod
    async def get_note(self, note_id: str) -> NoteResponse:
        """Fetch a note, creating it empty when absent."""
        pass

    @abstractmethod
    async def save_note(self, note_id: str, request: NoteSaveRequest) -> SuccessResponse:
        """Record an edit for coalesced persistence."""
        pass

    @abstractmethod
    async def force_save_note(self, note_id: str, request: NoteSaveRequest) -> SuccessResponse:
        """Persist immediately."""
        pass

    @abstractmethod
    async def delete_note(self, note_id: str) -> SuccessResponse:
        """Delete a note and drop its pending edits."""
        pass

    @abstractmethod
    async def list_notes(self) -> List[NoteSummary]:
        """All notes, pending edits first, most recent first."""
        pass


class IHealthService(ABC):
    """Health check service interface."""

    @abstractmethod
    async def get_health_status(self) -> HealthCheckResponse:
        """Get application health status."""
        pass

    @abstractmethod
    async def check_database_health(self) -> Dict[str, Any]:
        """Check database connectivity."""
        pass
