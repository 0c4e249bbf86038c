from sqlalchemy import Column, String, DateTime, Boolean, JSON
from datetime import datetime, timezone
from .session import Base
import uuid


def gen_uuid():
    return str(uuid.uuid4())


class Event(Base):
    __tablename__ = "events"
    id = Column(String, primary_key=True, default=gen_uuid)
    title = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    start_at = Column(DateTime, nullable=False, index=True)
    end_at = Column(DateTime, nullable=False, index=True)
    # legacy "HH:MM" display strings kept alongside the real instants
    start_time = Column(String, nullable=True)
    end_time = Column(String, nullable=True)
    all_day = Column(Boolean, nullable=False, default=False)
    type = Column(String, nullable=False, default="meeting", index=True)
    priority = Column(String, nullable=False, default="Medium")
    status = Column(String, nullable=False, default="confirmed", index=True)
    location = Column(String, nullable=False, default="")
    attendees = Column(JSON, nullable=True)  # list of strings
    color = Column(String, nullable=False, default="#1976D2")
    recurring = Column(JSON, nullable=True)  # descriptor only, never expanded
    reminders = Column(JSON, nullable=True)
    project_id = Column(String, nullable=True, index=True)
    task_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
