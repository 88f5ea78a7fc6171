import logging
import re
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from conected.core.errors import StoreError, UniqueConstraintViolation
from conected.models.user import User

logger = logging.getLogger(__name__)

# Columns covered by a unique index on the users table
UNIQUE_USER_FIELDS = ("username", "email")

# Driver-specific shapes of a unique violation, each capturing the column or index name
_DUPLICATE_PATTERNS = (
    # SQLite: UNIQUE constraint failed: users.username
    re.compile(r"UNIQUE constraint failed: \w+\.(\w+)"),
    # PostgreSQL: DETAIL:  Key (username)=(alice) already exists.
    re.compile(r"Key \((\w+)\)=\("),
    # MySQL: Duplicate entry 'alice' for key 'users.ix_users_username'
    re.compile(r"Duplicate entry .* for key '(?:\w+\.)?(\w+)'"),
)


def duplicate_field_from_error(error: IntegrityError) -> Optional[str]:
    """
    Name the unique field an IntegrityError collided on.

    Returns None when the driver message does not match a known shape or
    names something other than a unique user field.
    """
    detail = str(getattr(error, "orig", None) or error)
    for pattern in _DUPLICATE_PATTERNS:
        match = pattern.search(detail)
        if not match:
            continue
        key = match.group(1)
        if key in UNIQUE_USER_FIELDS:
            return key
        # Index names such as ix_users_username or users_email_key
        for field in UNIQUE_USER_FIELDS:
            if re.search(rf"(^|_){field}(_|$)", key):
                return field
    return None


class CredentialStore:
    """Persistence for user credentials"""

    @staticmethod
    def insert_user(db: Session, username: str, email: str, hashed_password: str) -> User:
        """
        Insert a user, relying on the unique indexes to reject duplicates.

        Raises UniqueConstraintViolation(field) on a duplicate username/email,
        StoreError on anything else the database rejects.
        """
        db_user = User(
            username=username,
            email=email,
            hashed_password=hashed_password,
        )
        try:
            db.add(db_user)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            field = duplicate_field_from_error(e)
            if field is None:
                logger.error(f"Unrecognized integrity error while inserting user: {e.orig}")
                raise StoreError() from e
            raise UniqueConstraintViolation(field) from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Database error while inserting user")
            raise StoreError() from e

        # Refresh to load auto-generated fields (id, timestamps) from database
        db.refresh(db_user)
        return db_user

    @staticmethod
    def find_by_username(db: Session, username: str) -> Optional[User]:
        """Exact, case-sensitive lookup"""
        try:
            return db.query(User).filter(User.username == username).first()
        except SQLAlchemyError as e:
            logger.exception("Database error while looking up user")
            raise StoreError() from e


credential_store = CredentialStore()
