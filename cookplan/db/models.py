"""
SQLAlchemy ORM models for CookPlan local storage.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, JSON, Index

from cookplan.db.database import Base
from cookplan.models.schemas import SessionStatus


class CookingSessionRecord(Base):
    """A persisted cooking session; the full aggregate lives in payload."""
    __tablename__ = "cooking_sessions"
    __table_args__ = (
        # Listing recent sessions orders by creation date
        Index('ix_cooking_sessions_created_at', 'created_at'),
    )

    id = Column(String(36), primary_key=True)
    status = Column(SQLEnum(SessionStatus), nullable=False, index=True)
    payload = Column(JSON, nullable=False)  # CookingSession.model_dump(mode="json")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc), nullable=False)
    completed_at = Column(DateTime, nullable=True)
