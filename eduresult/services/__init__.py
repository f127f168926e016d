# Services package
from .persistence import (
    KeyValueBackend,
    MemoryBackend,
    JsonFileBackend,
    PersistenceAdapter,
)
from .record_store import RecordStore
from .session_service import SessionService

__all__ = [
    "KeyValueBackend",
    "MemoryBackend",
    "JsonFileBackend",
    "PersistenceAdapter",
    "RecordStore",
    "SessionService",
]
