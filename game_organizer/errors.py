"""
Error kinds for Game Organizer and their single HTTP status mapping.

Route handlers never branch on exception classes; they raise or receive a
GameOrganizerError and let `status_for` decide the response code.
"""

from enum import Enum


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    INVALID_CREDENTIALS = "invalid_credentials"
    VALIDATION = "validation"
    DUPLICATE_USER = "duplicate_user"
    STORE_UNAVAILABLE = "store_unavailable"


_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.VALIDATION: 401,
    ErrorKind.DUPLICATE_USER: 401,
    ErrorKind.STORE_UNAVAILABLE: 500,
}


def status_for(kind: ErrorKind) -> int:
    """Map an error kind to its HTTP status code."""
    return _STATUS_BY_KIND[kind]


class GameOrganizerError(Exception):
    def __init__(self, kind: ErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value

    @property
    def status_code(self) -> int:
        return status_for(self.kind)


class StoreUnavailableError(GameOrganizerError):
    """The session map or credential store could not be used."""

    def __init__(self, message: str = "store unavailable"):
        super().__init__(ErrorKind.STORE_UNAVAILABLE, message)
