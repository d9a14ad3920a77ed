"""Appointment model definitions."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from backend.database import Base


class Appointment(Base):
    """Represents an entry on the weekly agenda."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(String)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    category_id = Column(Integer, index=True)  # categories.id, left dangling when the category is deleted
    email = Column(String)
    notification_sent = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Appointment id={self.id} title={self.title!r} start_time={self.start_time}>"
