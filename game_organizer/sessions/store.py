"""
In-memory session registry.

One instance lives for the whole process and is handed to whatever needs it.
Entries are never purged here; expiry is judged by the caller on read.
Nothing is persisted, so a restart logs every user out.
"""

import threading
from typing import Optional

from game_organizer.sessions.models import Session


class SessionStore:
    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def put(self, session_id: str, session: Session) -> None:
        with self._lock:
            self._sessions[session_id] = session

    def put_if_absent(self, session_id: str, session: Session) -> bool:
        """Insert only when the id is free. Returns False if it was taken."""
        with self._lock:
            if session_id in self._sessions:
                return False
            self._sessions[session_id] = session
            return True

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def remove_if(self, session_id: str, session: Session) -> bool:
        """Remove the entry only if it is still the given session."""
        with self._lock:
            if self._sessions.get(session_id) is not session:
                return False
            del self._sessions[session_id]
            return True

    def items(self) -> list[tuple[str, Session]]:
        with self._lock:
            return list(self._sessions.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
