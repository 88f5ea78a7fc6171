"""
Registration, login and session resolution.

Every operation takes the database session (and, where relevant, the
caller's session token) explicitly; nothing reads a request-global user.
"""
import logging
from typing import Optional
from sqlalchemy.orm import Session
from conected.core.errors import (
    DuplicateField,
    InvalidCredentials,
    PasswordMismatch,
    UniqueConstraintViolation,
)
from conected.core.security import get_password_hash, verify_password
from conected.models.user import User
from conected.services.credential_store import credential_store
from conected.services.session_store import session_store
from conected.types import AuthenticatedSession, RegisterRequest, SessionData

logger = logging.getLogger(__name__)


class AuthService:

    @staticmethod
    def register(db: Session, candidate: RegisterRequest) -> User:
        """
        Create a user from a registration form.

        Raises PasswordMismatch before touching the store, DuplicateField when
        the username or email is taken, StoreError on other database failures.
        Registering does not log the user in.
        """
        if candidate.password != candidate.confirm_password:
            raise PasswordMismatch()

        hashed_password = get_password_hash(candidate.password.strip())
        try:
            user = credential_store.insert_user(
                db,
                username=candidate.username,
                email=candidate.email,
                hashed_password=hashed_password,
            )
        except UniqueConstraintViolation as e:
            raise DuplicateField(e.field) from e

        logger.info(f"Registered user {user.username} (ID: {user.id})")
        return user

    @staticmethod
    def login(db: Session, username: str, password: str) -> AuthenticatedSession:
        """
        Check credentials and open a session.

        Unknown usernames and wrong passwords both raise InvalidCredentials
        with the same message.
        """
        user = credential_store.find_by_username(db, username)
        if user is None:
            raise InvalidCredentials()

        if not verify_password((password or "").strip(), user.hashed_password):
            raise InvalidCredentials()

        data = SessionData(user_id=user.id, username=user.username, email=user.email)
        token = session_store.create(db, data)
        return AuthenticatedSession(token=token, data=data)

    @staticmethod
    def logout(db: Session, token: Optional[str]) -> bool:
        return session_store.destroy(db, token)

    @staticmethod
    def current_session(db: Session, token: Optional[str]) -> Optional[SessionData]:
        return session_store.lookup(db, token)


auth_service = AuthService()
