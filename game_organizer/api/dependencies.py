from fastapi import Depends, Request, Response

from game_organizer.config import Settings
from game_organizer.errors import ErrorKind, GameOrganizerError
from game_organizer.guard import AuthGuard
from game_organizer.sessions import AuthenticatedSession, SessionManager
from game_organizer.users import UserRepository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_guard(request: Request) -> AuthGuard:
    return request.app.state.guard


def get_users(request: Request) -> UserRepository:
    return request.app.state.users


def require_session(
    request: Request,
    response: Response,
    guard: AuthGuard = Depends(get_guard),
) -> AuthenticatedSession:
    """Reject unauthenticated requests, otherwise rotate the session id.

    The returned session carries the new id.
    """
    authenticated = guard.authenticate(request.cookies)
    if authenticated is None:
        raise GameOrganizerError(ErrorKind.UNAUTHENTICATED)
    new_id = guard.refresh(authenticated, response)
    return AuthenticatedSession(
        session_id=new_id,
        session=guard.sessions.get_session(new_id),
    )
