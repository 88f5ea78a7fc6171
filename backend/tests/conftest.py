import os
import tempfile

# Point settings at throwaway storage before the package is imported
_TMP_DIR = tempfile.mkdtemp(prefix="conected-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "images")
os.environ["SECRET_KEY"] = "test-secret-key"
# Minimum bcrypt cost keeps the suite fast
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from conected.core.database import Base, SessionLocal, engine, init_db
from conected.main import app
from conected.models.subject import Subject


@pytest.fixture(autouse=True)
def reset_database():
    """Fresh tables for every test"""
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    # Not used as a context manager, so the lifespan (scheduler) never starts
    return TestClient(app)


def add_subjects(db, count, **overrides):
    """Insert `count` subjects titled 'Subject 1'..'Subject N'"""
    subjects = []
    for i in range(1, count + 1):
        subject = Subject(
            title=overrides.get("title", f"Subject {i}"),
            link_to_call=overrides.get("link_to_call", f"https://meet.example.com/room-{i}"),
            image=f"image-{i}.png",
            details={},
        )
        db.add(subject)
        subjects.append(subject)
    db.commit()
    return subjects
