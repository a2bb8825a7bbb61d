import logging
import threading
from typing import Optional, Protocol

from pydantic import BaseModel

from game_organizer.errors import ErrorKind, GameOrganizerError

logger = logging.getLogger(__name__)


class UserRecord(BaseModel):
    user_id: int
    username: str
    password_hash: str


class UserRepository(Protocol):
    def find_user_by_username(self, username: str) -> Optional[UserRecord]:
        """Return the record, or None when no such user exists.

        Raises StoreUnavailableError when the backing store cannot be read.
        """
        ...

    def add_user(self, username: str, password_hash: str) -> UserRecord:
        ...

    def count(self) -> int:
        ...


class InMemoryUserRepository:
    """Credential records keyed by case-insensitive username."""

    def __init__(self):
        self._users: dict[str, UserRecord] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(username: str) -> str:
        return username.strip().casefold()

    def find_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self._lock:
            return self._users.get(self._key(username))

    def add_user(self, username: str, password_hash: str) -> UserRecord:
        key = self._key(username)
        with self._lock:
            if key in self._users:
                raise GameOrganizerError(
                    ErrorKind.DUPLICATE_USER, f"username {username!r} already exists"
                )
            # ids follow insertion order, starting at 0
            record = UserRecord(
                user_id=len(self._users),
                username=username.strip(),
                password_hash=password_hash,
            )
            self._users[key] = record
        logger.debug("Stored user %s with id %d", record.username, record.user_id)
        return record

    def count(self) -> int:
        with self._lock:
            return len(self._users)
