from __future__ import annotations
from typing import Protocol, List, Optional
from datetime import datetime
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..db import models


class EventRepository(Protocol):
    def get(self, db: Session, event_id: str) -> Optional[models.Event]: ...
    def find_in_range(self, db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None, project_id: Optional[str] = None) -> List[models.Event]: ...


class SqlAlchemyEventRepository:
    """SQLAlchemy-backed implementation ordered by start time."""

    def get(self, db: Session, event_id: str) -> Optional[models.Event]:
        return db.query(models.Event).filter(models.Event.id == event_id).first()

    def find_in_range(self, db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None, project_id: Optional[str] = None) -> List[models.Event]:
        q = db.query(models.Event)
        # overlap: starts inside, ends inside, or spans the whole window.
        # Rows stored with end < start are clamped to their start on read, so
        # the later of the two instants bounds the window.
        if start is not None:
            q = q.filter(or_(models.Event.end_at >= start, models.Event.start_at >= start))
        if end is not None:
            q = q.filter(models.Event.start_at <= end)
        if project_id:
            q = q.filter(models.Event.project_id == project_id)
        return q.order_by(models.Event.start_at).all()
