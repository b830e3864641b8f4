# Note model - encrypted heading and content
from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel
from .types import HexBytes


class Note(BaseModel):
    """A note addressed by its short public id.

    Heading and content are never stored in plaintext: each is kept as a
    ciphertext / iv / auth tag triple written together on every save.
    """

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column("note_id", String(64), primary_key=True)

    heading_encrypted: Mapped[bytes] = mapped_column(HexBytes, default=b"", nullable=False)
    heading_iv: Mapped[bytes] = mapped_column(HexBytes, default=b"", nullable=False)
    heading_auth_tag: Mapped[bytes] = mapped_column(HexBytes, default=b"", nullable=False)

    content_encrypted: Mapped[bytes] = mapped_column(HexBytes, default=b"", nullable=False)
    content_iv: Mapped[bytes] = mapped_column(HexBytes, default=b"", nullable=False)
    content_auth_tag: Mapped[bytes] = mapped_column(HexBytes, default=b"", nullable=False)

    __table_args__ = (
        # listing is ordered by recency
        Index("idx_notes_updated_at", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Note(id='{self.id}', updated_at={self.updated_at})>"
