from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from conected.core.config import settings
from conected.core.database import get_db
from conected.services.auth_service import auth_service
from conected.types import SessionData


def get_session_token(request: Request) -> Optional[str]:
    """Raw session token from the session cookie, if any"""
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_current_session(
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db)
) -> Optional[SessionData]:
    """
    Resolve the caller's session.

    Returns None for anonymous callers, including stale or tampered cookies.
    Routes receive the result as an explicit argument.
    """
    if token is None:
        return None
    return auth_service.current_session(db, token)


def require_session(
    current_session: Optional[SessionData] = Depends(get_current_session)
) -> SessionData:
    """Same as get_current_session, but anonymous callers get 401"""
    if current_session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please sign in to continue",
        )
    return current_session
