"""Custom SQLAlchemy types for NoteSync models."""

import logging
from typing import Optional

from sqlalchemy import Text, TypeDecorator

logger = logging.getLogger(__name__)


class HexBytes(TypeDecorator):
    """
    Store raw bytes as lowercase hex text.

    Keeps encrypted columns readable in any SQL console and compatible with
    rows written by other clients using the same hex layout. Empty bytes are
    stored as an empty string, which the store reads back as "no value".
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[bytes], dialect):
        if value is None:
            return None
        return bytes(value).hex()

    def process_result_value(self, value: Optional[str], dialect) -> Optional[bytes]:
        if value is None:
            return None
        try:
            return bytes.fromhex(value)
        except ValueError:
            logger.warning(f"Stored value is not valid hex ({len(value)} chars), it will fail to decrypt")
            # too short for any nonce or tag, so the cipher rejects it
            return b"\x00"
