"""
SQLAlchemy ORM Models
Brand Presence Tracker
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON, Index
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone

Base = declarative_base()


def utcnow_naive() -> datetime:
    """Current UTC time without tzinfo; SQLite DateTime columns are naive."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TrackingSessionRecord(Base):
    """One tracking run. `results` holds the per-platform payload as written by the tracker."""
    __tablename__ = "tracking_session"

    session_id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False)      # UTC, naive
    brand = Column(String(255))
    results = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=utcnow_naive)

    __table_args__ = (Index("ix_tracking_session_timestamp", "timestamp"),)
