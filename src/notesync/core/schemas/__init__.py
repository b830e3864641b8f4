"""
Pydantic schemas for validating and documenting API requests and responses.
"""

from .common import ErrorResponse, HealthCheckResponse, SuccessResponse
from .notes import (
    NoteResponse,
    NoteSaveRequest,
    NoteSummary,
    NoteUrlResponse,
    RealtimeNoteUpdate,
)

__all__ = [
    # Note schemas
    "NoteSaveRequest",
    "NoteResponse",
    "NoteSummary",
    "NoteUrlResponse",
    "RealtimeNoteUpdate",
    # Common schemas
    "ErrorResponse",
    "SuccessResponse",
    "HealthCheckResponse",
]
