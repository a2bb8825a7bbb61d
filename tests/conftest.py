from datetime import datetime, timedelta, timezone
from http.cookies import SimpleCookie

import pytest
from fastapi.testclient import TestClient

from game_organizer.auth import hash_password
from game_organizer.config import Settings
from game_organizer.main import create_app
from game_organizer.users import InMemoryUserRepository

# Keeps PBKDF2 fast in tests; production default is 600 000.
TEST_ITERATIONS = 1_000

ALICE_PASSWORD = "Str0ng!pass"


class FakeClock:
    """Settable UTC clock. Starts at the real current time so cookie jars keep
    the cookies the app issues."""

    def __init__(self):
        self.current = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, minutes: float) -> None:
        self.current += timedelta(minutes=minutes)


def make_settings(**overrides) -> Settings:
    defaults = dict(password_hash_iterations=TEST_ITERATIONS, _env_file=None)
    defaults.update(overrides)
    return Settings(**defaults)


def parse_set_cookies(response) -> dict:
    """Map cookie name -> Morsel for every Set-Cookie header on a response."""
    headers = response.headers
    # httpx and starlette spell the multi-value getter differently
    if hasattr(headers, "get_list"):
        raw = headers.get_list("set-cookie")
    else:
        raw = headers.getlist("set-cookie")
    cookies = {}
    for header in raw:
        jar = SimpleCookie()
        jar.load(header)
        cookies.update(jar)
    return cookies


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def users() -> InMemoryUserRepository:
    repo = InMemoryUserRepository()
    repo.add_user("alice", hash_password(ALICE_PASSWORD, TEST_ITERATIONS))
    return repo


@pytest.fixture
def app(settings, users, clock):
    return create_app(settings=settings, users=users, clock=clock)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def sessions(app):
    return app.state.sessions
