"""
Session Module - Durable state for one browser-style board session.

A session spans page loads:
- Slots are written as the user acts (load, score, save draft)
- Startup reconciliation decides what is shown
- Reset is the only operation that clears everything

The store is the single place holding process-wide mutable state.
"""

from .store import (
    SessionStore,
    Slot,
    StorageBackend,
    MemoryBackend,
    FileBackend,
    PersistenceUnavailable,
)
from .manager import SessionManager, SessionPhase, StartupView, NoActiveGameError
from .uploads import UploadChannel

__all__ = [
    "SessionStore",
    "Slot",
    "StorageBackend",
    "MemoryBackend",
    "FileBackend",
    "PersistenceUnavailable",
    "SessionManager",
    "SessionPhase",
    "StartupView",
    "NoActiveGameError",
    "UploadChannel",
]
