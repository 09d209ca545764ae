"""
Session stores: get/set an InterviewSession by session id.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError

from interview_engine.core.models import InterviewSession
from interview_engine.storage.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Abstract base class for interview session persistence."""

    @abstractmethod
    async def load(self, session_id: str) -> InterviewSession | None:
        """
        Load a session.

        Args:
            session_id: Session identifier

        Returns:
            Stored session, or None if nothing is stored for this id

        Raises:
            PersistenceError: Store could not be read
        """
        pass

    @abstractmethod
    async def save(self, session: InterviewSession) -> None:
        """
        Insert or replace a session.

        Raises:
            PersistenceError: Store could not be written
        """
        pass


class InMemorySessionStore(SessionStore):
    """Keeps sessions in a dict; contents die with the process."""

    def __init__(self):
        self._sessions: dict[str, dict] = {}

    async def load(self, session_id: str) -> InterviewSession | None:
        data = self._sessions.get(session_id)
        return InterviewSession.model_validate(data) if data is not None else None

    async def save(self, session: InterviewSession) -> None:
        # Store a snapshot so later in-memory mutation does not leak in
        self._sessions[session.session_id] = session.model_dump(mode="json")


class JsonFileSessionStore(SessionStore):
    """One JSON file per session under a directory."""

    def __init__(self, directory: str | Path = "sessions"):
        self.directory = Path(directory)

    def _path(self, session_id: str) -> Path:
        safe_id = "".join(c if c.isalnum() or c in "-_" else "_" for c in session_id)
        return self.directory / f"session_{safe_id}.json"

    async def load(self, session_id: str) -> InterviewSession | None:
        return await asyncio.to_thread(self._load_sync, session_id)

    async def save(self, session: InterviewSession) -> None:
        await asyncio.to_thread(self._save_sync, session)

    def _load_sync(self, session_id: str) -> InterviewSession | None:
        path = self._path(session_id)
        if not path.exists():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return InterviewSession.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise PersistenceError(f"Failed to load session from {path}: {e}") from e

    def _save_sync(self, session: InterviewSession) -> None:
        path = self._path(session.session_id)
        tmp_path = path.with_suffix(".json.tmp")

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(session.model_dump_json(indent=2))
            tmp_path.replace(path)
        except OSError as e:
            raise PersistenceError(f"Failed to save session to {path}: {e}") from e

        logger.debug(f"Saved session {session.session_id} to {path}")
