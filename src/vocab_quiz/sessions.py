"""Registry of live quiz and learning sessions, keyed by generated ids."""

from __future__ import annotations

import logging
import uuid
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionNotFoundError(KeyError):
    """No live session with the given id."""


class SessionRegistry(Generic[T]):
    """Owns session objects for the surfaces that hand out session ids.

    Anything stored here may define ``quit()``; it is called when the
    session is discarded.
    """

    def __init__(self, kind: str = "session") -> None:
        self.kind = kind
        self._sessions: dict[str, T] = {}

    def add(self, session: T) -> str:
        session_id = uuid.uuid4().hex[:12]
        self._sessions[session_id] = session
        logger.debug("Registered %s %s", self.kind, session_id)
        return session_id

    def get(self, session_id: str) -> T:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"{self.kind.capitalize()} not found: {session_id}") from None

    def discard(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(f"{self.kind.capitalize()} not found: {session_id}")
        quit_ = getattr(session, "quit", None)
        if quit_ is not None:
            quit_()

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.discard(session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
