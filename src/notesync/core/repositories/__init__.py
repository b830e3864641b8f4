"""Repository layer for data access."""

from .note_repository import NoteRecord, NoteStore, truncate_preview

__all__ = [
    "NoteRecord",
    "NoteStore",
    "truncate_preview",
]
