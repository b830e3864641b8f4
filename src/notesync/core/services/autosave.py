"""Auto-save coordinator - coalesces rapid edits into delayed writes."""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncContextManager, Callable, Dict, List, Optional, Tuple

from ..models.base import utcnow
from ..repositories.note_repository import NoteRecord, NoteStore

logger = logging.getLogger(__name__)

StoreFactory = Callable[[], AsyncContextManager[NoteStore]]

DEFAULT_DELAY_SECONDS = 120.0


@dataclass
class PendingNote:
    """Latest unsaved values for a note."""

    heading: str
    content: str
    # first edit since the last flush; used as created_at if the note is new
    session_started_at: datetime
    updated_at: datetime


@dataclass
class DrainResult:
    flushed: List[str] = field(default_factory=list)
    failed: Dict[str, BaseException] = field(default_factory=dict)


class AutoSaveCoordinator:
    """Holds pending edits per note and writes each one after a quiet period.

    Every new edit for a note cancels that note's scheduled write and
    schedules a fresh one, so a burst of edits produces a single write
    carrying the latest values. Writes for the same note are serialized;
    writes for different notes run independently.
    """

    def __init__(self, store_factory: StoreFactory, delay_seconds: float = DEFAULT_DELAY_SECONDS):
        self._store_factory = store_factory
        self.delay_seconds = delay_seconds
        self._pending: Dict[str, PendingNote] = {}
        self._timers: Dict[str, asyncio.Task] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def get_pending(self, note_id: str) -> Optional[PendingNote]:
        return self._pending.get(note_id)

    def pending_items(self) -> List[Tuple[str, PendingNote]]:
        """Pending notes, most recently edited first."""
        return sorted(self._pending.items(), key=lambda item: item[1].updated_at, reverse=True)

    def has_scheduled_flush(self, note_id: str) -> bool:
        return note_id in self._timers

    def record_edit(self, note_id: str, heading: str, content: str) -> PendingNote:
        """Remember the latest values and restart the note's save timer."""
        now = utcnow()
        previous = self._pending.get(note_id)
        entry = PendingNote(
            heading=heading,
            content=content,
            session_started_at=previous.session_started_at if previous else now,
            updated_at=now,
        )
        self._pending[note_id] = entry
        self._schedule(note_id)
        logger.debug(f"Recorded edit for note {note_id}")
        return entry

    async def flush(self, note_id: str) -> bool:
        """Write the pending values for a note now. No-op when nothing is pending.

        Store errors propagate; the failed values are dropped unless a newer
        edit arrived while the write was in progress.
        """
        async with self._serialized(note_id):
            entry = self._pending.get(note_id)
            if entry is None:
                return True
            try:
                async with self._store_factory() as store:
                    await store.upsert(
                        note_id,
                        entry.heading,
                        entry.content,
                        created_at=entry.session_started_at,
                    )
            finally:
                # keep edits recorded during the write
                if self._pending.get(note_id) is entry:
                    del self._pending[note_id]
                    self._cancel_timer(note_id)

        logger.info(f"Auto-saved note {note_id}")
        return True

    async def force_flush(self, note_id: str, heading: str, content: str) -> NoteRecord:
        """Write the given values immediately, bypassing the save delay."""
        seen = self._pending.get(note_id)
        self._cancel_timer(note_id)

        async with self._serialized(note_id):
            current = self._pending.get(note_id)
            created_at = current.session_started_at if current else None
            async with self._store_factory() as store:
                record = await store.upsert(note_id, heading, content, created_at=created_at)
            if current is not None and self._pending.get(note_id) is current and current is seen:
                del self._pending[note_id]
                self._cancel_timer(note_id)

        logger.info(f"Force-saved note {note_id}")
        return record

    async def discard(self, note_id: str) -> None:
        """Drop pending values without writing and wait out any write in progress."""
        dropped = self._pending.pop(note_id, None)
        self._cancel_timer(note_id)
        async with self._serialized(note_id):
            pass
        if dropped is not None:
            logger.info(f"Discarded pending edits for note {note_id}")

    async def drain_all(self) -> DrainResult:
        """Flush every pending note. Individual failures are logged, not raised."""
        for task in self._timers.values():
            task.cancel()
        self._timers.clear()

        note_ids = list(self._pending)
        if not note_ids:
            return DrainResult()

        logger.info(f"Draining {len(note_ids)} pending notes")
        outcomes = await asyncio.gather(
            *(self.flush(note_id) for note_id in note_ids), return_exceptions=True
        )

        result = DrainResult()
        for note_id, outcome in zip(note_ids, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    f"Failed to flush note {note_id} during drain",
                    exc_info=outcome,
                    extra={"note_id": note_id},
                )
                result.failed[note_id] = outcome
            else:
                result.flushed.append(note_id)

        logger.info(
            "Drain complete",
            extra={"flushed": len(result.flushed), "failed": len(result.failed)},
        )
        return result

    def _schedule(self, note_id: str) -> None:
        self._cancel_timer(note_id)
        self._timers[note_id] = asyncio.create_task(self._flush_later(note_id))

    def _cancel_timer(self, note_id: str) -> None:
        task = self._timers.pop(note_id, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def _flush_later(self, note_id: str) -> None:
        await asyncio.sleep(self.delay_seconds)
        # from here on the write can no longer be cancelled by a new edit
        if self._timers.get(note_id) is asyncio.current_task():
            del self._timers[note_id]
        try:
            await self.flush(note_id)
        except Exception as e:
            logger.error(
                f"Scheduled auto-save failed for note {note_id}",
                exc_info=e,
                extra={"note_id": note_id},
            )

    @asynccontextmanager
    async def _serialized(self, note_id: str):
        lock = self._locks.get(note_id)
        if lock is None:
            lock = self._locks[note_id] = asyncio.Lock()
        self._lock_users[note_id] = self._lock_users.get(note_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[note_id] -= 1
            if self._lock_users[note_id] == 0:
                del self._lock_users[note_id]
                del self._locks[note_id]
