"""Notes API endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NoteSyncError
from ..core.schemas.common import ErrorResponse, SuccessResponse
from ..core.schemas.notes import NoteResponse, NoteSaveRequest, NoteSummary
from ..core.services import AutoSaveCoordinator, NoteService
from ..database import get_db_session
from ..dependencies import get_coordinator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notes"])

ERROR_RESPONSES = {500: {"model": ErrorResponse}}


def get_note_service(
    session: AsyncSession = Depends(get_db_session),
    coordinator: AutoSaveCoordinator = Depends(get_coordinator),
) -> NoteService:
    return NoteService(session, coordinator)


def _failure(action: str, note_id: str, exc: Exception) -> JSONResponse:
    logger.error(f"Error trying to {action} note {note_id}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": f"Failed to {action} note"})


@router.get(
    "/note/{note_id}",
    response_model=NoteResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def get_note(note_id: str, note_service: NoteService = Depends(get_note_service)):
    """Get a note, creating an empty one for an unknown id."""
    try:
        return await note_service.get_note(note_id)
    except NoteSyncError as e:
        return _failure("fetch", note_id, e)


@router.post("/note/{note_id}/save", response_model=SuccessResponse, responses=ERROR_RESPONSES)
async def save_note(
    note_id: str,
    request: NoteSaveRequest,
    note_service: NoteService = Depends(get_note_service),
):
    """Queue an edit for auto-save."""
    try:
        return await note_service.save_note(note_id, request)
    except NoteSyncError as e:
        return _failure("save", note_id, e)


@router.post("/note/{note_id}/force-save", response_model=SuccessResponse, responses=ERROR_RESPONSES)
async def force_save_note(
    note_id: str,
    request: NoteSaveRequest,
    note_service: NoteService = Depends(get_note_service),
):
    """Write a note immediately."""
    try:
        return await note_service.force_save_note(note_id, request)
    except NoteSyncError as e:
        return _failure("save", note_id, e)


@router.delete("/note/{note_id}", response_model=SuccessResponse, responses=ERROR_RESPONSES)
async def delete_note(note_id: str, note_service: NoteService = Depends(get_note_service)):
    """Delete a note."""
    try:
        return await note_service.delete_note(note_id)
    except NoteSyncError as e:
        return _failure("delete", note_id, e)


@router.get(
    "/notes",
    response_model=List[NoteSummary],
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def list_notes(note_service: NoteService = Depends(get_note_service)):
    """List all notes, most recently edited first."""
    try:
        return await note_service.list_notes()
    except NoteSyncError as e:
        logger.error("Error fetching notes", exc_info=e)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch notes"})
