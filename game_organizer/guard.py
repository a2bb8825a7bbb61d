import logging
from datetime import datetime, timezone
from typing import Mapping, Optional

from fastapi import Response

from game_organizer.config import Settings
from game_organizer.sessions import AuthenticatedSession, SessionManager

logger = logging.getLogger(__name__)


class AuthGuard:
    """Decides whether a request's cookies carry a live session.

    Failures are returned as None, never raised, so the route decides the
    status code.
    """

    def __init__(self, sessions: SessionManager, settings: Settings):
        self.sessions = sessions
        self.settings = settings

    def authenticate(self, cookies: Optional[Mapping[str, str]]) -> Optional[AuthenticatedSession]:
        if not cookies:
            return None
        session_id = cookies.get(self.settings.session_cookie_name)
        if not session_id:
            return None

        session = self.sessions.get_session(session_id)
        if session is None:
            return None
        if self.sessions.is_expired(session):
            # cleanup on read; there is no background expiry by default
            self.sessions.delete_session(session_id)
            logger.debug("Session for %s expired and was removed", session.username)
            return None
        return AuthenticatedSession(session_id=session_id, session=session)

    def refresh(self, authenticated: AuthenticatedSession, response: Response) -> str:
        """Rotate the session id and re-issue the session cookie.

        The old id stops working immediately. Only the session cookie is
        re-issued; the user id cookie keeps its login expiry.
        """
        new_id = self.sessions.create_session(
            authenticated.username, self.settings.renewal_ttl_minutes
        )
        self.sessions.delete_session(authenticated.session_id)
        new_session = self.sessions.get_session(new_id)
        set_auth_cookie(
            response,
            self.settings.session_cookie_name,
            new_id,
            new_session.expires_at,
            self.settings,
        )
        logger.debug("Rotated session for %s", authenticated.username)
        return new_id


def set_auth_cookie(
    response: Response, name: str, value: str, expires: datetime, settings: Settings
) -> None:
    response.set_cookie(
        key=name,
        value=value,
        expires=expires.astimezone(timezone.utc),  # cookie dates must be GMT
        httponly=True,          # not accessible from JavaScript
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
    )
