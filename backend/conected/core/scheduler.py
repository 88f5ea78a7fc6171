"""
Background scheduler for periodic tasks.

This module manages background jobs that run on a schedule:
- Purge expired sessions: Runs every SESSION_PURGE_INTERVAL_MINUTES
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError
from conected.core.config import settings
from conected.core.database import SessionLocal
from conected.services.session_store import session_store
import logging

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def purge_expired_sessions_job():
    """
    Background job to delete expired session rows.

    Lookups already ignore expired sessions; this keeps the table from growing.
    """
    db = SessionLocal()
    try:
        deleted = session_store.purge_expired(db)
        if deleted > 0:
            logger.info(f"Session purge completed: Deleted {deleted} expired sessions")
        else:
            logger.info("Session purge completed: No expired sessions found")
    except SQLAlchemyError as e:
        logger.error(f"Error in purge_expired_sessions_job: {str(e)}")
        db.rollback()
    finally:
        db.close()


def start_scheduler():
    """
    Start the background scheduler.

    This should be called when the FastAPI app starts.
    """
    if not scheduler.running:
        scheduler.add_job(
            purge_expired_sessions_job,
            trigger=IntervalTrigger(minutes=settings.SESSION_PURGE_INTERVAL_MINUTES),
            id="purge_expired_sessions",
            name="Purge expired sessions",
            replace_existing=True
        )

        scheduler.start()
        logger.info(
            f"Background scheduler started. Session purge scheduled every "
            f"{settings.SESSION_PURGE_INTERVAL_MINUTES} minutes."
        )


def stop_scheduler():
    """
    Stop the background scheduler.

    This should be called when the FastAPI app shuts down.
    """
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped.")
