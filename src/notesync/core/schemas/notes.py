"""
Note schemas.

These schemas define the API contracts for note fetch, save and listing.
Field names go over the wire in camelCase.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialising field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NoteSaveRequest(CamelModel):
    """Save / force-save request body. Absent fields are treated as empty."""

    heading: str = Field(default="", description="Note heading")
    content: str = Field(default="", description="Note content")

    @field_validator("heading", "content", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "heading": "Todo",
                "content": "Buy milk",
            }
        },
    )


class NoteResponse(CamelModel):
    """Single note, decrypted."""

    note_id: str = Field(description="Public note id")
    heading: str = Field(description="Note heading")
    content: str = Field(description="Note content")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")
    is_local_data: Optional[bool] = Field(
        default=None, description="True when served from unsaved in-memory edits"
    )


class NoteSummary(NoteResponse):
    """Listing entry; content is truncated."""


class NoteUrlResponse(CamelModel):
    """Freshly generated note id."""

    note_url: str = Field(description="New random note id")


class RealtimeNoteUpdate(CamelModel):
    """Payload of a note-update event from a client."""

    note_id: str = Field(min_length=1, description="Note being edited")
    heading: str = Field(default="")
    content: str = Field(default="")

    @field_validator("heading", "content", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v
