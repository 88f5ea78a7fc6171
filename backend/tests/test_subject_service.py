import asyncio
import io
from unittest.mock import MagicMock

import pytest
from fastapi import UploadFile
from sqlalchemy.exc import OperationalError

from conected.core.config import settings
from conected.core.errors import SubmissionFailed
from conected.models.subject import Subject
from conected.services.subject_service import subject_service
from conected.storage.local_storage import storage


def make_upload(filename="cover.png", content=b"\x89PNG fake image"):
    return UploadFile(file=io.BytesIO(content), filename=filename)


def stored_files():
    return sorted(p.name for p in storage.upload_dir.iterdir())


def failing_db():
    db = MagicMock()
    db.commit.side_effect = OperationalError("INSERT INTO subjects ...", {}, Exception("disk I/O error"))
    return db


def test_submit_subject_keeps_extra_fields(db):
    fields = {
        "title": "Organic Chemistry",
        "link_to_call": "https://meet.example.com/orgchem",
        "description": "Weekly lab review",
        "level": "advanced",
    }
    subject = subject_service.submit_subject(db, fields, "1234.png")

    stored = db.query(Subject).one()
    assert stored.id == subject.id
    assert stored.title == "Organic Chemistry"
    assert stored.link_to_call == "https://meet.example.com/orgchem"
    assert stored.image == "1234.png"
    assert stored.details == {"description": "Weekly lab review", "level": "advanced"}


def test_blob_ref_wins_over_submitted_image_field(db):
    subject = subject_service.submit_subject(db, {"title": "Art", "image": "spoofed.png"}, "real.png")
    assert subject.image == "real.png"
    assert subject.details == {}


def test_submit_subject_failure_rolls_back():
    db = failing_db()

    with pytest.raises(SubmissionFailed):
        subject_service.submit_subject(db, {"title": "Art"}, "art.png")

    db.rollback.assert_called_once()


def test_add_subject_stores_image(db):
    subject = asyncio.run(subject_service.add_subject(db, {"title": "Music"}, make_upload()))

    assert subject.image.endswith(".png")
    assert storage.file_exists(subject.image)
    assert storage.get_file_path(subject.image).read_bytes() == b"\x89PNG fake image"


def test_add_subject_removes_image_when_save_fails():
    before = stored_files()

    with pytest.raises(SubmissionFailed):
        asyncio.run(subject_service.add_subject(failing_db(), {"title": "Music"}, make_upload()))

    assert stored_files() == before


@pytest.mark.parametrize("upload", [None, make_upload(filename=""), make_upload(filename="notes.exe")])
def test_add_subject_requires_an_image(db, upload):
    with pytest.raises(SubmissionFailed):
        asyncio.run(subject_service.add_subject(db, {"title": "Music"}, upload))

    assert db.query(Subject).count() == 0


def test_add_subject_rejects_oversized_image(db):
    upload = UploadFile(
        file=io.BytesIO(b"\x89PNG"),
        filename="huge.png",
        size=settings.MAX_FILE_SIZE + 1,
    )
    before = stored_files()

    with pytest.raises(SubmissionFailed):
        asyncio.run(subject_service.add_subject(db, {"title": "Music"}, upload))

    assert db.query(Subject).count() == 0
    assert stored_files() == before


def test_add_subject_fails_when_image_cannot_be_written(db, monkeypatch):
    async def broken_save(file):
        raise OSError("No space left on device")

    monkeypatch.setattr(storage, "save_file", broken_save)

    with pytest.raises(SubmissionFailed):
        asyncio.run(subject_service.add_subject(db, {"title": "Music"}, make_upload()))

    assert db.query(Subject).count() == 0
