from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from conected.core.database import Base


class UserSession(Base):
    """
    Server-side record of a logged-in browser context.

    The browser only holds a signed token naming `id`; deleting the row
    ends the session even if the token has not expired yet.
    """
    __tablename__ = "user_sessions"

    id = Column(String(64), primary_key=True)
    # Identifies the user; the session does not own the user's lifetime
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Display fields cached at login time
    username = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
