"""
Credential handling for Game Organizer.

Passwords are stored as salted PBKDF2-HMAC-SHA256 hashes, never in plain text.
Encoded form: ``pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>``.
"""

import hashlib
import logging
import re
import secrets
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel

from game_organizer.errors import ErrorKind, GameOrganizerError
from game_organizer.users import UserRepository

logger = logging.getLogger(__name__)

_ALGORITHM: str = "pbkdf2_sha256"
_SALT_BYTES: int = 16
DEFAULT_ITERATIONS: int = 600_000
MIN_PASSWORD_LENGTH: int = 8


class CredentialCheck(BaseModel):
    """Outcome of a login attempt. `user_id` and `username` are only set on a
    match; `username` is the stored spelling, not the submitted one."""

    match: bool
    user_id: Optional[int] = None
    username: Optional[str] = None


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    salt = secrets.token_bytes(_SALT_BYTES)
    dk = _derive(password, salt, iterations)
    return f"{_ALGORITHM}${iterations}${salt.hex()}${dk.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """Constant-time check of `password` against an encoded hash.

    A malformed hash never raises; it simply does not match.
    """
    try:
        algorithm, iterations, salt_hex, hash_hex = encoded.split("$")
        if algorithm != _ALGORITHM:
            return False
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
        dk = _derive(password, salt, int(iterations))
    except (AttributeError, ValueError, OverflowError):
        logger.warning("Stored password hash is malformed")
        return False
    return secrets.compare_digest(dk, expected)


@lru_cache(maxsize=8)
def dummy_hash(iterations: int) -> str:
    """Throwaway hash that unknown usernames are checked against.

    Build it at startup so the first failed lookup costs one derivation,
    like every other failure.
    """
    return hash_password(secrets.token_hex(16), iterations)


def check_credentials(
    users: UserRepository,
    username: str,
    password: str,
    iterations: int = DEFAULT_ITERATIONS,
) -> CredentialCheck:
    """Verify a username/password pair.

    Unknown users still pay for a full hash derivation so the response time
    does not reveal whether the account exists.
    """
    record = users.find_user_by_username(username)
    if record is None:
        verify_password(password, dummy_hash(iterations))
        return CredentialCheck(match=False)
    if not verify_password(password, record.password_hash):
        return CredentialCheck(match=False)
    return CredentialCheck(match=True, user_id=record.user_id, username=record.username)


def is_strong_password(password: str, min_length: int = MIN_PASSWORD_LENGTH) -> bool:
    return (
        len(password) >= min_length
        and re.search(r"[A-Z]", password) is not None
        and re.search(r"[a-z]", password) is not None
        and re.search(r"[0-9]", password) is not None
    )


def register_user(
    users: UserRepository,
    username: str,
    password: str,
    iterations: int = DEFAULT_ITERATIONS,
    min_length: int = MIN_PASSWORD_LENGTH,
) -> int:
    """Create a credential record and return the new user id."""
    username = (username or "").strip()
    if not username or not password:
        raise GameOrganizerError(ErrorKind.VALIDATION, "username and password are required")
    if not is_strong_password(password, min_length):
        raise GameOrganizerError(ErrorKind.VALIDATION, "password is too weak")
    if users.find_user_by_username(username) is not None:
        raise GameOrganizerError(
            ErrorKind.DUPLICATE_USER, f"username {username!r} already exists"
        )
    record = users.add_user(username, hash_password(password, iterations))
    return record.user_id
