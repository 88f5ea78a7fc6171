import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from pydantic import BaseModel
from conected.core.config import settings
from conected.core.database import get_db
from conected.core.errors import DuplicateField, InvalidCredentials, PasswordMismatch
from conected.api.dependencies import get_session_token, require_session
from conected.services.auth_service import auth_service
from conected.types import RegisterRequest, SessionData, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class SessionResponse(BaseModel):
    user_id: int
    username: str
    email: str


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user"""
    try:
        return auth_service.register(db, user_data)
    except PasswordMismatch as e:
        logger.info(f"Registration rejected: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except DuplicateField as e:
        logger.info(f"Registration rejected: {e}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


@router.post("/login", response_model=SessionResponse)
def login(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db)
):
    """Check credentials and start a cookie session"""
    try:
        session = auth_service.login(db, form_data.username, form_data.password)
    except InvalidCredentials as e:
        logger.info("Login rejected for submitted credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )

    # One session per browser context: retire the one the cookie pointed at
    if token:
        auth_service.logout(db, token)

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.token,
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return session.data


@router.post("/logout")
def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db)
):
    """End the current session, if there is one"""
    if token:
        auth_service.logout(db, token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": "Logged out"}


@router.get("/me", response_model=SessionResponse)
def get_current_user_info(current_session: SessionData = Depends(require_session)):
    """Get the identity attached to the current session"""
    return current_session
