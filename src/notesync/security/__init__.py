"""Security utilities."""

from .cipher import EncryptedField, FieldCipher, get_cipher
from .ids import generate_note_id

__all__ = [
    "EncryptedField",
    "FieldCipher",
    "get_cipher",
    "generate_note_id",
]
