import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from starlette.datastructures import UploadFile
from sqlalchemy.orm import Session
from conected.core.database import get_db
from conected.core.errors import InvalidPage, SubmissionFailed
from conected.api.dependencies import require_session
from conected.services.listing_service import listing_service
from conected.services.subject_service import subject_service
from conected.types import ListingPage, SessionData, SubjectResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subjects", tags=["subjects"])

LISTING_URL = "/api/subjects"


@router.get("", response_model=ListingPage)
def list_subjects(
    page: Optional[str] = Query(None, description="1-based page number"),
    search: Optional[str] = Query(None, description="Text to find in title or call link"),
    db: Session = Depends(get_db)
):
    """List subjects, optionally filtered by a search term"""
    try:
        return listing_service.list_subjects(db, page, search)
    except InvalidPage as e:
        # Out-of-range or malformed pages go back to the first page
        logger.info(f"Redirecting to first page: {e}")
        return RedirectResponse(LISTING_URL, status_code=status.HTTP_303_SEE_OTHER)


@router.post("", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
async def add_subject(
    request: Request,
    current_session: SessionData = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Add a subject from a multipart form with an `image` file"""
    form = await request.form()
    upload = form.get("image")
    if not isinstance(upload, UploadFile):
        upload = None
    fields = {
        key: value for key, value in form.multi_items()
        if key != "image" and isinstance(value, str)
    }

    try:
        db_subject = await subject_service.add_subject(db, fields, upload)
    except SubmissionFailed as e:
        logger.warning(f"Subject submission by {current_session.username} failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    logger.info(f"Subject {db_subject.id} added by {current_session.username}")
    return db_subject
