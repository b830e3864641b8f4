# Base model for database stuff
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import DateTime, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(DeclarativeBase):
    """Common base for all models."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={getattr(self, 'id', None)})>"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON."""
        result = {}
        for attr in inspect(self).mapper.column_attrs:
            val = getattr(self, attr.key)
            if isinstance(val, datetime):
                val = val.isoformat()
            elif isinstance(val, bytes):
                val = val.hex()
            result[attr.key] = val
        return result
