"""AES-256-GCM field encryption."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..core.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

KEY_SIZE = 32
IV_SIZE = 16
TAG_SIZE = 16


@dataclass(frozen=True)
class EncryptedField:
    """Ciphertext plus the iv and tag needed to decrypt it."""

    ciphertext: bytes
    iv: bytes
    auth_tag: bytes


class FieldCipher:
    """Encrypts and decrypts single text fields with one process-wide key."""

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise ConfigurationError(f"Encryption key must be {KEY_SIZE} bytes, got {len(key)}")
        self._aead = AESGCM(key)

    @classmethod
    def from_hex(cls, key_hex: Optional[str]) -> "FieldCipher":
        """Build a cipher from hex key material, generating a throwaway key if absent."""
        if not key_hex:
            logger.warning(
                "ENCRYPTION_KEY not configured; generated a random key. "
                "Notes written by this process cannot be decrypted after a restart."
            )
            return cls(AESGCM.generate_key(bit_length=KEY_SIZE * 8))
        try:
            key = bytes.fromhex(key_hex.strip())
        except ValueError as e:
            raise ConfigurationError("Encryption key is not valid hex") from e
        return cls(key)

    def encrypt(self, plaintext: str) -> EncryptedField:
        iv = os.urandom(IV_SIZE)
        sealed = self._aead.encrypt(iv, plaintext.encode("utf-8"), None)
        # AESGCM appends the tag to the ciphertext
        return EncryptedField(
            ciphertext=sealed[:-TAG_SIZE],
            iv=iv,
            auth_tag=sealed[-TAG_SIZE:],
        )

    def decrypt(self, ciphertext: bytes, iv: bytes, auth_tag: bytes) -> str:
        """Decrypt a field, raising AuthenticationError when the tag does not verify."""
        if len(auth_tag) != TAG_SIZE or len(iv) == 0:
            raise AuthenticationError("Malformed encrypted field")
        try:
            plaintext = self._aead.decrypt(iv, ciphertext + auth_tag, None)
        except (InvalidTag, ValueError) as e:
            raise AuthenticationError("Authentication tag mismatch") from e
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise AuthenticationError("Decrypted data is not valid UTF-8") from e


# Singleton instance
_cipher: Optional[FieldCipher] = None


def get_cipher() -> FieldCipher:
    """Get the process-wide cipher, creating it from settings on first use."""
    global _cipher
    if _cipher is None:
        from ..config import get_settings

        _cipher = FieldCipher.from_hex(get_settings().encryption_key)
    return _cipher
