import logging
import secrets
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from conected.core.errors import StoreError
from conected.core.security import create_session_token, decode_session_token, session_expiry
from conected.models.session import UserSession
from conected.types import SessionData

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored here is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SessionStore:
    """
    Server-side sessions addressed by signed tokens.

    A token is only honoured while its row exists and has not expired, so
    destroy() takes effect immediately.
    """

    @staticmethod
    def create(db: Session, data: SessionData) -> str:
        """Persist a new session and return the token naming it"""
        session_id = secrets.token_urlsafe(32)
        expires_at = session_expiry(_utc_now())
        row = UserSession(
            id=session_id,
            user_id=data.user_id,
            username=data.username,
            email=data.email,
            expires_at=expires_at,
        )
        try:
            db.add(row)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Database error while creating session")
            raise StoreError() from e
        return create_session_token(session_id, expires_at)

    @staticmethod
    def _find(db: Session, token: Optional[str]) -> Optional[UserSession]:
        session_id = decode_session_token(token) if token else None
        if session_id is None:
            return None
        return db.query(UserSession).filter(UserSession.id == session_id).first()

    @staticmethod
    def lookup(db: Session, token: Optional[str]) -> Optional[SessionData]:
        """Resolve a token to its session data, or None if it is not live"""
        try:
            row = SessionStore._find(db, token)
        except SQLAlchemyError as e:
            logger.exception("Database error while looking up session")
            raise StoreError() from e
        if row is None:
            return None
        if _as_utc(row.expires_at) <= _utc_now():
            return None
        return SessionData.model_validate(row)

    @staticmethod
    def destroy(db: Session, token: Optional[str]) -> bool:
        """Delete the session behind a token; returns whether one existed"""
        try:
            row = SessionStore._find(db, token)
            if row is None:
                return False
            db.delete(row)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Database error while destroying session")
            raise StoreError() from e
        return True

    @staticmethod
    def purge_expired(db: Session) -> int:
        """Delete every expired session row and return how many were removed"""
        deleted = (
            db.query(UserSession)
            .filter(UserSession.expires_at <= _utc_now())
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted


session_store = SessionStore()
