import logging
from pathlib import Path
from typing import Any, Mapping, Optional
from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from conected.core.config import settings
from conected.core.errors import SubmissionFailed
from conected.models.subject import Subject
from conected.storage.local_storage import storage

logger = logging.getLogger(__name__)

# Form fields that map onto Subject columns; everything else goes to `details`
SUBJECT_COLUMNS = ("title", "link_to_call")


class SubjectService:

    @staticmethod
    def submit_subject(db: Session, fields: Mapping[str, Any], blob_ref: str) -> Subject:
        """
        Persist a subject whose image is already stored under `blob_ref`.

        Fields are not validated here. The record is written in a single
        commit; on any database error nothing is kept and SubmissionFailed
        is raised.
        """
        record = {**fields, "image": blob_ref}
        details = {
            key: value for key, value in record.items()
            if key not in SUBJECT_COLUMNS and key != "image"
        }
        db_subject = Subject(
            title=record.get("title"),
            link_to_call=record.get("link_to_call"),
            image=record["image"],
            details=details,
        )
        try:
            db.add(db_subject)
            db.commit()
            db.refresh(db_subject)
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Subject could not be saved")
            raise SubmissionFailed() from e

        return db_subject

    @staticmethod
    async def store_image(upload: Optional[UploadFile]) -> str:
        """Hand the uploaded image to storage and return its filename"""
        if upload is None or not upload.filename:
            raise SubmissionFailed("An image is required")

        file_ext = Path(upload.filename).suffix.lower()
        allowed_extensions = settings.get_allowed_image_extensions()
        if file_ext not in allowed_extensions:
            raise SubmissionFailed(
                f"Image type not supported. Allowed: {', '.join(sorted(allowed_extensions))}"
            )

        if upload.size is not None and upload.size > settings.MAX_FILE_SIZE:
            raise SubmissionFailed("Image is too large")

        try:
            return await storage.save_file(upload)
        except OSError as e:
            logger.exception("Image could not be stored")
            raise SubmissionFailed() from e

    @staticmethod
    async def add_subject(
        db: Session,
        fields: Mapping[str, Any],
        upload: Optional[UploadFile]
    ) -> Subject:
        """Store the image, then the subject; drop the image if the subject is not saved"""
        blob_ref = await SubjectService.store_image(upload)
        try:
            return SubjectService.submit_subject(db, fields, blob_ref)
        except SubmissionFailed:
            storage.delete_file(blob_ref)
            raise


subject_service = SubjectService()
