"""
Database models for NoteSync.

Models included:
    - Note: encrypted heading/content addressed by a short public id
"""

from .base import BaseModel
from .note import Note

__all__ = [
    "BaseModel",
    "Note",
]
