"""
Session stores: read-only access to recorded tracking sessions for the
analysis engine, plus `save()` for whatever collects them.

Backends:
  - JsonFileSessionStore: one tracking_<epoch-ms>.json file per session
  - SqlSessionStore:      tracking_session table via SQLAlchemy
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Union

from sqlalchemy.orm import sessionmaker

from models.schemas import TrackingSession, PlatformResult, parse_timestamp
from db.database import session_scope
from db.models import TrackingSessionRecord

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Source of tracking sessions, always returned oldest first."""

    @abstractmethod
    def load_since(self, cutoff: datetime) -> List[TrackingSession]:
        """Sessions with timestamp >= cutoff, sorted ascending by timestamp."""

    @abstractmethod
    def latest(self) -> Optional[TrackingSession]:
        """Most recent session, or None when the store is empty."""

    @abstractmethod
    def save(self, session: TrackingSession) -> str:
        """Persist a session and return its identifier."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored sessions."""

    def load_recent(self, days: int, now: Optional[datetime] = None) -> List[TrackingSession]:
        """Sessions from the last `days` days."""
        now = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
        return self.load_since(now - timedelta(days=days))


# ─── JSON files ──────────────────────────────────────────────────────────────


class JsonFileSessionStore(SessionStore):
    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def _files(self) -> List[Path]:
        if not self.data_dir.is_dir():
            return []
        return sorted(self.data_dir.glob("*.json"))

    def _read(self, path: Path) -> Optional[TrackingSession]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return TrackingSession.from_dict(json.load(f), session_id=path.stem)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Skipping unreadable session file {path.name}: {e}")
            return None

    def _load_all(self) -> List[TrackingSession]:
        sessions = [s for s in (self._read(p) for p in self._files()) if s is not None]
        return sorted(sessions, key=lambda s: s.timestamp)

    def load_since(self, cutoff: datetime) -> List[TrackingSession]:
        cutoff = parse_timestamp(cutoff)
        sessions = [s for s in self._load_all() if s.timestamp >= cutoff]
        logger.debug(f"Loaded {len(sessions)} sessions since {cutoff.isoformat()} from {self.data_dir}")
        return sessions

    def latest(self) -> Optional[TrackingSession]:
        sessions = self._load_all()
        return sessions[-1] if sessions else None

    def save(self, session: TrackingSession) -> str:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        millis = int(session.timestamp.timestamp() * 1000)
        path = self.data_dir / f"tracking_{millis}.json"
        while path.exists():
            millis += 1
            path = self.data_dir / f"tracking_{millis}.json"

        with open(path, "w", encoding="utf-8") as f:
            json.dump(session.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Saved session to {path}")
        return path.stem

    def count(self) -> int:
        # unreadable files are not sessions
        return len(self._load_all())


# ─── SQL ─────────────────────────────────────────────────────────────────────


def _to_utc_naive(ts: datetime) -> datetime:
    return parse_timestamp(ts).astimezone(timezone.utc).replace(tzinfo=None)


def _record_to_session(record: TrackingSessionRecord) -> TrackingSession:
    return TrackingSession(
        timestamp=record.timestamp.replace(tzinfo=timezone.utc),
        brand=record.brand or "",
        results={
            platform: PlatformResult.from_dict(result or {})
            for platform, result in (record.results or {}).items()
        },
        session_id=str(record.session_id),
    )


class SqlSessionStore(SessionStore):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def load_since(self, cutoff: datetime) -> List[TrackingSession]:
        with session_scope(self.session_factory) as db:
            records = (
                db.query(TrackingSessionRecord)
                .filter(TrackingSessionRecord.timestamp >= _to_utc_naive(cutoff))
                .order_by(TrackingSessionRecord.timestamp, TrackingSessionRecord.session_id)
                .all()
            )
            return [_record_to_session(r) for r in records]

    def latest(self) -> Optional[TrackingSession]:
        with session_scope(self.session_factory) as db:
            record = (
                db.query(TrackingSessionRecord)
                .order_by(
                    TrackingSessionRecord.timestamp.desc(),
                    TrackingSessionRecord.session_id.desc(),
                )
                .first()
            )
            return _record_to_session(record) if record else None

    def save(self, session: TrackingSession) -> str:
        payload = session.to_dict()
        with session_scope(self.session_factory) as db:
            record = TrackingSessionRecord(
                timestamp=_to_utc_naive(session.timestamp),
                brand=session.brand,
                results=payload["results"],
            )
            db.add(record)
            db.flush()
            session_id = str(record.session_id)
        logger.info(f"Saved session {session_id} to database")
        return session_id

    def count(self) -> int:
        with session_scope(self.session_factory) as db:
            return db.query(TrackingSessionRecord).count()


# ─── Factory ─────────────────────────────────────────────────────────────────


def get_session_store(config=None) -> SessionStore:
    """Store selected by SESSION_BACKEND ("json" or "sql")."""
    if config is None:
        from config.settings import settings as config

    backend = config.SESSION_BACKEND.lower()
    if backend == "json":
        return JsonFileSessionStore(config.DATA_DIR)
    if backend == "sql":
        from db.database import SessionLocal, init_db
        init_db()
        return SqlSessionStore(SessionLocal)
    raise ValueError(f"Unknown session backend: {config.SESSION_BACKEND}")
