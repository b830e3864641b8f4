"""Note service implementation."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ...security import FieldCipher, get_cipher
from ..exceptions import StoreError
from ..repositories.note_repository import UNTITLED, NoteRecord, NoteStore, truncate_preview
from ..schemas.common import SuccessResponse
from ..schemas.notes import NoteResponse, NoteSaveRequest, NoteSummary
from .autosave import AutoSaveCoordinator
from .interfaces import INoteService

logger = logging.getLogger(__name__)


class NoteService(INoteService):
    """Composes the note store with the auto-save coordinator."""

    def __init__(
        self,
        session: AsyncSession,
        coordinator: AutoSaveCoordinator,
        cipher: Optional[FieldCipher] = None,
    ):
        self.session = session
        self.store = NoteStore(session, cipher or get_cipher())
        self.coordinator = coordinator
        self.settings = get_settings()

    async def get_note(self, note_id: str) -> NoteResponse:
        """Get note by ID.

        Behavior:
        - Unsaved in-memory edits win over the stored copy and are flagged as local.
          createdAt comes from the stored note when there is one.
        - Otherwise the stored note is returned.
        - An unknown id creates an empty note.
        """
        pending = self.coordinator.get_pending(note_id)
        if pending is not None:
            return NoteResponse(
                note_id=note_id,
                heading=pending.heading,
                content=pending.content,
                created_at=await self._stored_created_at(note_id),
                updated_at=pending.updated_at,
                is_local_data=True,
            )

        record = await self.store.get_by_id(note_id)
        if record is None:
            record = await self.store.create_empty(note_id)
        return self._record_to_response(record)

    async def save_note(self, note_id: str, request: NoteSaveRequest) -> SuccessResponse:
        """Queue the edit; it is written once edits stop for the auto-save delay."""
        self.coordinator.record_edit(note_id, request.heading, request.content)
        return SuccessResponse(success=True, message="Note queued for auto-save")

    async def force_save_note(self, note_id: str, request: NoteSaveRequest) -> SuccessResponse:
        await self.coordinator.force_flush(note_id, request.heading, request.content)
        return SuccessResponse(success=True, message="Note saved successfully")

    async def delete_note(self, note_id: str) -> SuccessResponse:
        await self.coordinator.discard(note_id)
        deleted = await self.store.delete(note_id)
        if not deleted:
            # reported as success either way
            logger.info(f"Delete requested for unknown note {note_id}")
        return SuccessResponse(success=True, message="Note deleted successfully")

    async def list_notes(self) -> List[NoteSummary]:
        """List notes with unsaved edits merged in ahead of stored ones."""
        preview_length = self.settings.preview_length
        pending_items = self.coordinator.pending_items()
        pending_ids = {note_id for note_id, _ in pending_items}

        stored = await self.store.list_all(preview_length)
        created_by_id = {record.note_id: record.created_at for record in stored}

        summaries = [
            NoteSummary(
                note_id=note_id,
                heading=pending.heading or UNTITLED,
                content=truncate_preview(pending.content, preview_length),
                created_at=created_by_id.get(note_id),
                updated_at=pending.updated_at,
                is_local_data=True,
            )
            for note_id, pending in pending_items
        ]
        summaries.extend(
            NoteSummary(**self._record_fields(record))
            for record in stored
            if record.note_id not in pending_ids
        )
        return summaries

    async def _stored_created_at(self, note_id: str) -> Optional[datetime]:
        # pending edits are still served while the store is unreachable
        try:
            return await self.store.get_created_at(note_id)
        except StoreError as e:
            logger.warning(f"Serving unsaved note {note_id} without createdAt: {e}")
            return None

    def _record_to_response(self, record: NoteRecord) -> NoteResponse:
        return NoteResponse(**self._record_fields(record))

    def _record_fields(self, record: NoteRecord) -> dict:
        return {
            "note_id": record.note_id,
            "heading": record.heading,
            "content": record.content,
            "created_at": record.created_at,
            "updated_at": record.updated_at,
        }
