from .database import init_db, session_scope, make_engine, engine, SessionLocal
from .models import Base, TrackingSessionRecord
from .store import SessionStore, JsonFileSessionStore, SqlSessionStore, get_session_store

__all__ = [
    "init_db", "session_scope", "make_engine", "engine", "SessionLocal",
    "Base", "TrackingSessionRecord",
    "SessionStore", "JsonFileSessionStore", "SqlSessionStore", "get_session_store",
]
