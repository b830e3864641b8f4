# Process-wide collaborators shared by HTTP and WebSocket handlers
from typing import Optional

from .config import get_settings
from .core.services.autosave import AutoSaveCoordinator
from .core.services.relay import Relay
from .database import make_store_factory

# Singleton instances
_coordinator: Optional[AutoSaveCoordinator] = None
_relay: Optional[Relay] = None


def get_coordinator() -> AutoSaveCoordinator:
    """Get the auto-save coordinator singleton."""
    global _coordinator
    if _coordinator is None:
        _coordinator = AutoSaveCoordinator(
            make_store_factory(),
            delay_seconds=get_settings().autosave_delay_seconds,
        )
    return _coordinator


def get_relay() -> Relay:
    """Get the realtime relay singleton."""
    global _relay
    if _relay is None:
        _relay = Relay()
    return _relay
