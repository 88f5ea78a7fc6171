from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from conected.core.config import settings

# CryptContext handles password hashing using bcrypt
# The cost factor is fixed by BCRYPT_ROUNDS so every stored hash is comparable
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__default_rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a recognizable hash
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    # bcrypt generates a salt per hash, so equal passwords produce different hashes
    return pwd_context.hash(password)


def create_session_token(session_id: str, expires_at: datetime) -> str:
    """Sign a session id into a token that the browser keeps in a cookie"""
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    to_encode = {"sid": session_id, "exp": expires_at}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str) -> Optional[str]:
    """Return the session id carried by a token, or None if it is invalid"""
    if not token:
        return None
    try:
        # Verifies signature and expiration
        payload = jwt.decode(token, settings.SECRET_KEY,
                             algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    session_id = payload.get("sid")
    return session_id if isinstance(session_id, str) and session_id else None


def session_expiry(now: Optional[datetime] = None) -> datetime:
    """Expiry timestamp for a session created at `now`"""
    now = now or datetime.now(timezone.utc)
    return now + timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)
