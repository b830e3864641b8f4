"""Application exception types."""


class NoteSyncError(Exception):
    """Base class for NoteSync errors."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class AuthenticationError(NoteSyncError):
    """Ciphertext failed tag verification (tampered, corrupted or wrong key)."""


class StoreError(NoteSyncError):
    """Underlying persistence unavailable or rejected the operation."""


class ConfigurationError(NoteSyncError):
    """Invalid configuration detected at startup."""
