"""Note store - encrypted persistence of notes."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import AuthenticationError, StoreError
from ..models.base import utcnow
from ..models.note import Note
from ...security.cipher import FieldCipher

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


@dataclass
class NoteRecord:
    """Decrypted view of a note."""

    note_id: str
    heading: str
    content: str
    created_at: Optional[datetime]
    updated_at: datetime


def truncate_preview(content: str, length: int = 100) -> str:
    """Cut content for listings, marking the cut with an ellipsis."""
    if len(content) > length:
        return content[:length] + "..."
    return content


class NoteStore:
    """Repository for note database operations.

    Callers only ever see plaintext; encryption happens on the way in and
    decryption on the way out.
    """

    def __init__(self, session: AsyncSession, cipher: FieldCipher):
        self.session = session
        self.cipher = cipher

    async def get_by_id(self, note_id: str) -> Optional[NoteRecord]:
        """Get a decrypted note, or None when absent."""
        note = await self._fetch(note_id)
        if note is None:
            return None
        return NoteRecord(
            note_id=note.id,
            heading=self._decrypt_heading(note),
            content=self._decrypt_content(note),
            created_at=note.created_at,
            updated_at=note.updated_at,
        )

    async def get_created_at(self, note_id: str) -> Optional[datetime]:
        """Creation time of a stored note, without reading its encrypted fields."""
        stmt = select(Note.created_at).where(Note.id == note_id)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to fetch note {note_id}: {e}") from e
        return result.scalar_one_or_none()

    async def create_empty(self, note_id: str) -> NoteRecord:
        """Insert an empty note.

        If another session inserted the same id first, that note is returned.
        """
        now = utcnow()
        note = Note(id=note_id, created_at=now, updated_at=now)
        self.session.add(note)
        if not await self._commit(f"create note {note_id}", allow_conflict=True):
            logger.info(f"Note {note_id} was created concurrently, reading it back")
            existing = await self.get_by_id(note_id)
            if existing is None:
                raise StoreError(f"Failed to create note {note_id}")
            return existing
        logger.info(f"Created empty note {note_id}")
        return NoteRecord(note_id=note_id, heading="", content="", created_at=now, updated_at=now)

    async def upsert(
        self,
        note_id: str,
        heading: str,
        content: str,
        created_at: Optional[datetime] = None,
    ) -> NoteRecord:
        """Write both fields, inserting the note if it does not exist yet.

        created_at is only used on insert; an existing note keeps its own.
        A note inserted by another session between the read and the insert
        is updated instead.
        """
        now = utcnow()
        enc_heading = self.cipher.encrypt(heading)
        enc_content = self.cipher.encrypt(content)

        retried = False
        while True:
            note = await self._fetch(note_id)
            inserting = note is None
            if inserting:
                created = created_at or now
                # created_at <= updated_at
                if created > now:
                    created = now
                note = Note(id=note_id, created_at=created)
                self.session.add(note)

            note.heading_encrypted = enc_heading.ciphertext
            note.heading_iv = enc_heading.iv
            note.heading_auth_tag = enc_heading.auth_tag
            note.content_encrypted = enc_content.ciphertext
            note.content_iv = enc_content.iv
            note.content_auth_tag = enc_content.auth_tag
            note.updated_at = now

            # the row exists after a conflict, so the retry takes the update path
            if await self._commit(f"save note {note_id}", allow_conflict=inserting and not retried):
                break
            retried = True
            logger.info(f"Note {note_id} was created concurrently, updating it instead")

        logger.debug(f"Persisted note {note_id}")
        return NoteRecord(
            note_id=note_id,
            heading=heading,
            content=content,
            created_at=note.created_at,
            updated_at=now,
        )

    async def delete(self, note_id: str) -> bool:
        """Delete a note. Returns False when it did not exist."""
        note = await self._fetch(note_id)
        if note is None:
            logger.warning(f"Note {note_id} not found for deletion")
            return False
        await self.session.delete(note)
        await self._commit(f"delete note {note_id}")
        logger.info(f"Deleted note {note_id}")
        return True

    async def list_all(self, preview_length: int = 100) -> List[NoteRecord]:
        """All notes, most recently updated first, with truncated content.

        Notes that fail to decrypt are listed with placeholder values.
        """
        stmt = select(Note).order_by(desc(Note.updated_at))
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list notes: {e}") from e

        summaries = []
        for note in result.scalars():
            try:
                heading = self._decrypt_heading(note)
            except AuthenticationError:
                logger.warning(f"Could not decrypt heading of note {note.id}")
                heading = UNTITLED
            try:
                content = self._decrypt_content(note)
            except AuthenticationError:
                logger.warning(f"Could not decrypt content of note {note.id}")
                content = ""

            summaries.append(
                NoteRecord(
                    note_id=note.id,
                    heading=heading or UNTITLED,
                    content=truncate_preview(content, preview_length),
                    created_at=note.created_at,
                    updated_at=note.updated_at,
                )
            )
        return summaries

    async def _fetch(self, note_id: str) -> Optional[Note]:
        stmt = select(Note).where(Note.id == note_id)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to fetch note {note_id}: {e}") from e
        return result.scalar_one_or_none()

    async def _commit(self, action: str, allow_conflict: bool = False) -> bool:
        """Commit the session. Returns False on a tolerated duplicate-key insert."""
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if allow_conflict:
                return False
            logger.error(f"Failed to {action}: {e}")
            raise StoreError(f"Failed to {action}") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to {action}: {e}")
            await self.session.rollback()
            raise StoreError(f"Failed to {action}") from e
        return True

    def _decrypt_heading(self, note: Note) -> str:
        if not note.heading_encrypted:
            return ""
        return self.cipher.decrypt(note.heading_encrypted, note.heading_iv, note.heading_auth_tag)

    def _decrypt_content(self, note: Note) -> str:
        if not note.content_encrypted:
            return ""
        return self.cipher.decrypt(note.content_encrypted, note.content_iv, note.content_auth_tag)
