from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from conected.core.config import settings

# SQLite connections are shared with FastAPI's threadpool workers
connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

# Create database engine - manages connection pool
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

# Create session factory - each request gets a new session
# autocommit=False: Changes require explicit commit
# autoflush=False: Don't auto-flush before queries
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all database models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    This is a FastAPI dependency that provides a database session to route handlers.
    The session is automatically closed after the request completes (via finally block).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        # Always close session, even if request raises an exception
        db.close()


def init_db():
    """Create tables for every model registered on Base"""
    # Importing the models registers them with Base.metadata
    from conected.models import session, subject, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
