from game_organizer.sessions.manager import SessionManager, utc_now
from game_organizer.sessions.models import AuthenticatedSession, Session
from game_organizer.sessions.store import SessionStore
