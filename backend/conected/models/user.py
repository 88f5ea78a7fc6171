from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from conected.core.database import Base


class User(Base):
    """
    User model representing registered accounts.

    Users are created on registration and never updated afterwards.
    Passwords are stored as bcrypt hashes (never plaintext).
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Unique indexes enforce the no-duplicate invariant atomically at insert time
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
