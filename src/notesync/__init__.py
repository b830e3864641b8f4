"""
NoteSync Backend - Collaborative Encrypted Notes

Notes are encrypted at rest, auto-saved after a quiet period and
synchronised live between everyone viewing the same note.
"""

__version__ = "1.0.0"
