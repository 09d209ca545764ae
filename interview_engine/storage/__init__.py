"""Interview session persistence."""

from interview_engine.storage.exceptions import PersistenceError
from interview_engine.storage.retry import with_retry
from interview_engine.storage.session_store import (
    InMemorySessionStore,
    JsonFileSessionStore,
    SessionStore,
)

__all__ = [
    "InMemorySessionStore",
    "JsonFileSessionStore",
    "PersistenceError",
    "SessionStore",
    "with_retry",
]
