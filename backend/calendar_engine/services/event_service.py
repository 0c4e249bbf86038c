from sqlalchemy.orm import Session
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from ..db import models
from ..domain.event import CalendarEvent, normalize_events
from ..repositories.event_repository import EventRepository, SqlAlchemyEventRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title", "description", "start_at", "end_at", "start_time", "end_time", "all_day",
    "type", "priority", "status", "location", "attendees", "color", "recurring",
    "reminders", "project_id", "task_id",
)


class EventNotFound(Exception):
    pass


def _column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def to_record(row: models.Event) -> Dict[str, Any]:
    """Row -> document shape understood by ``CalendarEvent.from_record``."""
    return {
        "id": row.id,
        "title": row.title,
        "description": row.description,
        "start": row.start_at,
        "end": row.end_at,
        "startTime": row.start_time,
        "endTime": row.end_time,
        "allDay": row.all_day,
        "type": row.type,
        "priority": row.priority,
        "status": row.status,
        "location": row.location,
        "attendees": row.attendees,
        "color": row.color,
        "recurring": row.recurring,
        "reminders": row.reminders,
        "projectId": row.project_id,
        "taskId": row.task_id,
    }


def to_domain(row: models.Event) -> CalendarEvent:
    return CalendarEvent.from_record(to_record(row))


class EventService:
    def __init__(self, repository: EventRepository | None = None):
        self.repo = repository or SqlAlchemyEventRepository()

    def create_event(self, db: Session, title: str, start_at: datetime, end_at: datetime,
                     **fields: Any) -> models.Event:
        values = {k: _column_value(v) for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
        event = models.Event(title=title, start_at=start_at, end_at=end_at, **values)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    def get_event(self, db: Session, event_id: str) -> models.Event:
        event = self.repo.get(db, event_id)
        if not event:
            raise EventNotFound()
        return event

    def list_events(self, db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None,
                    project_id: Optional[str] = None) -> List[models.Event]:
        return self.repo.find_in_range(db, start=start, end=end, project_id=project_id)

    def load_calendar_events(self, db: Session, start: Optional[datetime] = None,
                             end: Optional[datetime] = None) -> List[CalendarEvent]:
        """Stored rows as canonical events; an unreadable row is skipped."""
        return normalize_events(to_record(row) for row in self.list_events(db, start=start, end=end))

    def update_event(self, db: Session, event_id: str, **changes: Any) -> models.Event:
        event = self.get_event(db, event_id)
        for name, value in changes.items():
            if name in UPDATABLE_FIELDS and value is not None:
                setattr(event, name, _column_value(value))
        event.updated_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(event)
        return event

    def apply_reschedule(self, db: Session, proposed: CalendarEvent) -> models.Event:
        """Persist the start/end pair produced by a committed drag."""
        event = self.update_event(db, proposed.identifier, start_at=proposed.start, end_at=proposed.end)
        logger.info("Rescheduled event %s to %s - %s", event.id, proposed.start, proposed.end)
        return event

    def delete_event(self, db: Session, event_id: str):
        event = self.get_event(db, event_id)
        db.delete(event)
        db.commit()
