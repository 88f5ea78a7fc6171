from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from conected.core.database import Base


class Subject(Base):
    """
    Subject listing shown on the browse page.

    `image` is the filename handed back by the image storage; any extra form
    fields submitted with the subject are kept as-is in `details`.
    """
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, index=True)
    # Both searchable columns are indexed
    title = Column(String, nullable=True, index=True)
    link_to_call = Column(String, nullable=True, index=True)
    image = Column(String, nullable=False)
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
