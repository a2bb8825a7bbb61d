from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Session(BaseModel):
    """Server-side record binding a session id to a user and an expiry."""

    model_config = ConfigDict(frozen=True)

    username: str
    expires_at: datetime


class AuthenticatedSession(BaseModel):
    """A live session together with the id it is stored under."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    session: Session

    @property
    def username(self) -> str:
        return self.session.username
