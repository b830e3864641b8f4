"""Public note id generation."""

import secrets
import string

ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits


def generate_note_id(length: int = 8) -> str:
    """Random alphanumeric id. Collisions are not checked."""
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
