import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from game_organizer.sessions.models import Session
from game_organizer.sessions.store import SessionStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# 256-bit URL-safe token
_TOKEN_BYTES = 32


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """Creates, fetches, expires and deletes sessions held in a SessionStore."""

    def __init__(self, store: SessionStore, clock: Clock = utc_now):
        self.store = store
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def create_session(self, username: str, ttl_minutes: float) -> str:
        """Store a new session for `username` and return its id.

        A negative TTL yields an already-expired session.
        """
        session = Session(
            username=username,
            expires_at=self.now() + timedelta(minutes=ttl_minutes),
        )
        while True:
            session_id = secrets.token_urlsafe(_TOKEN_BYTES)
            if self.store.put_if_absent(session_id, session):
                return session_id

    def get_session(self, session_id: str) -> Optional[Session]:
        return self.store.get(session_id)

    def delete_session(self, session_id: str) -> None:
        self.store.remove(session_id)

    def is_expired(self, session: Session) -> bool:
        return self.now() >= session.expires_at

    def purge_expired(self) -> int:
        """Remove every expired session. Returns how many were dropped."""
        removed = 0
        for session_id, session in self.store.items():
            if self.is_expired(session) and self.store.remove_if(session_id, session):
                removed += 1
        if removed:
            logger.debug("Purged %d expired sessions", removed)
        return removed
