import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from game_organizer.api.dependencies import (
    get_app_settings,
    get_guard,
    get_session_manager,
    get_users,
    require_session,
)
from game_organizer.auth import check_credentials, register_user
from game_organizer.config import Settings
from game_organizer.errors import ErrorKind, GameOrganizerError
from game_organizer.guard import AuthGuard, set_auth_cookie
from game_organizer.schemas import CurrentUser, LoginRequest, RegisterRequest, RegisterResponse
from game_organizer.sessions import AuthenticatedSession, SessionManager
from game_organizer.users import UserRepository

logger = logging.getLogger(__name__)

session_router = APIRouter(prefix="/session")
users_router = APIRouter(prefix="/users")
router = APIRouter()


# ── Sessions ──

@session_router.post("/login")
def login(
    data: Optional[LoginRequest] = Body(None),
    settings: Settings = Depends(get_app_settings),
    sessions: SessionManager = Depends(get_session_manager),
    users: UserRepository = Depends(get_users),
):
    if data is None:
        data = LoginRequest()
    if not data.username or not data.password:
        logger.warning("Unsuccessful login: empty username or password given")
        raise GameOrganizerError(ErrorKind.INVALID_CREDENTIALS)

    result = check_credentials(
        users, data.username, data.password, settings.password_hash_iterations
    )
    if not result.match:
        logger.warning("Unsuccessful login: invalid username/password for user %s", data.username)
        raise GameOrganizerError(ErrorKind.INVALID_CREDENTIALS)

    session_id = sessions.create_session(result.username, settings.login_ttl_minutes)
    expires_at = sessions.get_session(session_id).expires_at
    logger.info("Successful login for user %s", result.username)

    resp = JSONResponse({"ok": True})
    set_auth_cookie(resp, settings.session_cookie_name, session_id, expires_at, settings)
    set_auth_cookie(resp, settings.user_cookie_name, str(result.user_id), expires_at, settings)
    return resp


@session_router.get("/logout")
def logout(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    guard: AuthGuard = Depends(get_guard),
):
    authenticated = guard.authenticate(request.cookies)
    if authenticated is None:
        raise GameOrganizerError(ErrorKind.UNAUTHENTICATED)

    guard.sessions.delete_session(authenticated.session_id)
    logger.info("Logged out user %s", authenticated.username)

    # Erase both cookies by expiring them now.
    resp = JSONResponse({"detail": "Logged out"}, status_code=settings.logout_status_code)
    now = datetime.now(timezone.utc)
    set_auth_cookie(resp, settings.session_cookie_name, "", now, settings)
    set_auth_cookie(resp, settings.user_cookie_name, "", now, settings)
    return resp


@session_router.get("/auth")
def auth_status(request: Request, guard: AuthGuard = Depends(get_guard)):
    if guard.authenticate(request.cookies) is None:
        raise GameOrganizerError(ErrorKind.UNAUTHENTICATED)
    return {"ok": True}


# ── Users ──

@users_router.post("/register", response_model=RegisterResponse)
def register(
    data: Optional[RegisterRequest] = Body(None),
    settings: Settings = Depends(get_app_settings),
    users: UserRepository = Depends(get_users),
):
    if data is None:
        data = RegisterRequest()
    user_id = register_user(
        users,
        data.username or "",
        data.password or "",
        iterations=settings.password_hash_iterations,
        min_length=settings.password_min_length,
    )
    logger.info("Successfully registered username %s with id %d", data.username, user_id)
    return RegisterResponse(success=True)


@users_router.get("/me", response_model=CurrentUser)
def current_user(authenticated: AuthenticatedSession = Depends(require_session)):
    return CurrentUser(username=authenticated.username)


@router.get("/health")
async def health():
    return {"status": "ok"}
