"""
Cooking session persistence.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cookplan.config import settings
from cookplan.db.models import CookingSessionRecord
from cookplan.errors import DatabaseError, DatabaseIntegrityError, SessionNotFoundError
from cookplan.models.schemas import CookingSession

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Create, read, update and delete stored cooking sessions.

    The engine treats storage as opaque: sessions go in and come out as
    CookingSession models, serialized whole into a JSON column.
    """

    def __init__(self, db: Session):
        """
        Initialize the store.

        Args:
            db: SQLAlchemy database session for persistence operations.
        """
        self.db = db

    def save(self, session: CookingSession) -> CookingSession:
        """
        Insert or update a session.

        Args:
            session: Session to persist.

        Returns:
            The same session.
        """
        try:
            record = self.db.get(CookingSessionRecord, session.id)
            if record is None:
                record = CookingSessionRecord(id=session.id, created_at=session.created_at)
                self.db.add(record)

            record.status = session.status
            record.payload = session.model_dump(mode="json")
            record.completed_at = session.completed_at

            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.exception(f"Integrity error saving cooking session {session.id}")
            raise DatabaseIntegrityError(str(e.orig), details={"session_id": session.id}) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Database error saving cooking session {session.id}")
            raise DatabaseError(
                "Database error occurred while saving the cooking session.",
                details={"session_id": session.id},
            ) from e

        logger.debug(f"Saved cooking session {session.id} ({session.status.value})")
        return session

    def get(self, session_id: str) -> CookingSession:
        """
        Load a session.

        Raises:
            SessionNotFoundError: No session with that id.
        """
        try:
            record = self.db.get(CookingSessionRecord, session_id)
        except SQLAlchemyError as e:
            logger.exception(f"Database error loading cooking session {session_id}")
            raise DatabaseError(
                "Database error occurred while loading the cooking session.",
                details={"session_id": session_id},
            ) from e

        if record is None:
            raise SessionNotFoundError(session_id)
        return CookingSession.model_validate(record.payload)

    def list_recent(self, limit: Optional[int] = None) -> List[CookingSession]:
        """Most recently created sessions first."""
        limit = limit or settings.recent_sessions_limit
        try:
            records = (
                self.db.query(CookingSessionRecord)
                .order_by(CookingSessionRecord.created_at.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            logger.exception("Database error listing cooking sessions")
            raise DatabaseError("Database error occurred while listing cooking sessions.") from e

        return [CookingSession.model_validate(record.payload) for record in records]

    def delete(self, session_id: str) -> bool:
        """
        Delete a session.

        Returns:
            True if a session was deleted, False if it did not exist.
        """
        try:
            record = self.db.get(CookingSessionRecord, session_id)
            if record is None:
                return False
            self.db.delete(record)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Database error deleting cooking session {session_id}")
            raise DatabaseError(
                "Database error occurred while deleting the cooking session.",
                details={"session_id": session_id},
            ) from e
        return True
