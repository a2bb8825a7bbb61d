import asyncio
import contextlib
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from game_organizer.api.routes import router as base_router
from game_organizer.api.routes import session_router, users_router
from game_organizer.auth import dummy_hash
from game_organizer.config import Settings, get_settings
from game_organizer.errors import ErrorKind, GameOrganizerError
from game_organizer.guard import AuthGuard
from game_organizer.logging_config import configure_logging
from game_organizer.sessions import SessionManager, SessionStore, utc_now
from game_organizer.sessions.manager import Clock
from game_organizer.users import InMemoryUserRepository, UserRepository

logger = logging.getLogger(__name__)

_REGISTRATION_KINDS = {ErrorKind.VALIDATION, ErrorKind.DUPLICATE_USER}


def _error_body(kind: ErrorKind) -> dict:
    if kind is ErrorKind.STORE_UNAVAILABLE:
        return {"detail": "Internal server error"}
    if kind in _REGISTRATION_KINDS:
        return {"success": False}
    return {"detail": "Not authenticated"}


async def _sweep_expired_sessions(sessions: SessionManager, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            sessions.purge_expired()
        except Exception:
            logger.exception("Expired-session sweep failed")


def create_app(
    settings: Optional[Settings] = None,
    users: Optional[UserRepository] = None,
    clock: Clock = utc_now,
) -> FastAPI:
    settings = settings or get_settings()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = None
        if settings.session_sweep_interval_seconds > 0:
            sweeper = asyncio.create_task(
                _sweep_expired_sessions(app.state.sessions, settings.session_sweep_interval_seconds)
            )
            logger.info(
                "Expired-session sweep every %ss", settings.session_sweep_interval_seconds
            )
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await sweeper

    app = FastAPI(title="Game Organizer", lifespan=lifespan)

    sessions = SessionManager(SessionStore(), clock=clock)
    app.state.settings = settings
    app.state.sessions = sessions
    app.state.guard = AuthGuard(sessions, settings)
    app.state.users = users if users is not None else InMemoryUserRepository()
    dummy_hash(settings.password_hash_iterations)

    # ── Error mapping ──
    @app.exception_handler(GameOrganizerError)
    async def handle_game_organizer_error(request: Request, exc: GameOrganizerError):
        if exc.kind is ErrorKind.STORE_UNAVAILABLE:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        elif exc.kind in _REGISTRATION_KINDS:
            logger.warning("Unsuccessful registration: %s", exc.message)
        return JSONResponse(_error_body(exc.kind), status_code=exc.status_code)

    # ── CORS (the frontend sends cookies) ──
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    app.include_router(session_router)
    app.include_router(users_router)
    app.include_router(base_router)

    return app


app = create_app()


def run():
    import uvicorn

    settings = app.state.settings
    configure_logging(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)
