from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field, ConfigDict
from prometheus_client import Counter
from datetime import date, datetime
from typing import Optional, List
from ..db.session import get_db
from ..db import models
from ..services.date_utils import parse_datetime
from ..services.drag_service import DropOutcome, reschedule
from ..services.event_service import EventService, EventNotFound, to_domain
from ..errors import ValidationAppError, ConflictError, NotFoundError, DropRejectedError
from ..domain.enums import ConfirmationStatus, DragKind, EventType, Priority, RecurrenceFrequency

router = APIRouter(prefix="/events", tags=["events"])

DRAG_OUTCOMES = Counter(
    "calendar_engine_reschedule_total", "Reschedule (drag drop) outcomes", ["kind", "outcome"]
)

HHMM = r"^\d{2}:\d{2}$"


class RecurrenceSchema(BaseModel):
    enabled: bool = False
    frequency: Optional[RecurrenceFrequency] = None
    interval: int = Field(default=1, ge=1)
    end_date: Optional[str] = Field(None, alias="endDate")

    model_config = ConfigDict(populate_by_name=True)


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1)
    start: datetime
    end: datetime
    all_day: bool = Field(default=False, alias="allDay")
    start_time: Optional[str] = Field(None, alias="startTime", pattern=HHMM)
    end_time: Optional[str] = Field(None, alias="endTime", pattern=HHMM)
    type: EventType = Field(default=EventType.MEETING)
    priority: Priority = Field(default=Priority.MEDIUM)
    status: ConfirmationStatus = Field(default=ConfirmationStatus.CONFIRMED)
    description: str = ""
    location: str = ""
    attendees: List[str] = Field(default_factory=list)
    color: str = "#1976D2"
    recurring: Optional[RecurrenceSchema] = None
    reminders: List[str] = Field(default_factory=list)
    project_id: Optional[str] = Field(None, alias="projectId")
    task_id: Optional[str] = Field(None, alias="taskId")

    model_config = ConfigDict(populate_by_name=True)


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    all_day: Optional[bool] = Field(None, alias="allDay")
    start_time: Optional[str] = Field(None, alias="startTime", pattern=HHMM)
    end_time: Optional[str] = Field(None, alias="endTime", pattern=HHMM)
    type: Optional[EventType] = None
    priority: Optional[Priority] = None
    status: Optional[ConfirmationStatus] = None
    description: Optional[str] = None
    location: Optional[str] = None
    attendees: Optional[List[str]] = None
    color: Optional[str] = None
    recurring: Optional[RecurrenceSchema] = None
    reminders: Optional[List[str]] = None
    project_id: Optional[str] = Field(None, alias="projectId")
    task_id: Optional[str] = Field(None, alias="taskId")

    model_config = ConfigDict(populate_by_name=True)


class EventOut(BaseModel):
    id: str
    legacy_id: str = Field(..., alias="_id")
    title: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    all_day: bool = Field(..., alias="allDay")
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")
    type: str
    priority: str
    status: str
    description: str = ""
    location: str = ""
    attendees: List[str] = Field(default_factory=list)
    color: str
    recurring: Optional[RecurrenceSchema] = None
    reminders: List[str] = Field(default_factory=list)
    project_id: Optional[str] = Field(None, alias="projectId")
    task_id: Optional[str] = Field(None, alias="taskId")

    model_config = ConfigDict(populate_by_name=True)


class RescheduleIn(BaseModel):
    kind: DragKind = Field(default=DragKind.MOVE)
    drop_date: date = Field(..., alias="dropDate")

    model_config = ConfigDict(populate_by_name=True)


def _out(row: models.Event) -> EventOut:
    return EventOut.model_validate(to_domain(row).to_record())


def _fields(body: BaseModel) -> dict:
    values = body.model_dump(exclude={"start", "end", "title"}, exclude_none=True)
    if body.recurring is not None:
        values["recurring"] = body.recurring.model_dump(by_alias=True, mode="json")
    return values


@router.post("", response_model=EventOut, status_code=201)
def create_event(body: EventCreate, db: Session = Depends(get_db)):
    start_at = parse_datetime(body.start)
    end_at = parse_datetime(body.end)
    if end_at < start_at:
        raise ValidationAppError("EVENT_INVALID_TIME", "end before start")

    event = EventService().create_event(db, title=body.title, start_at=start_at, end_at=end_at, **_fields(body))
    return _out(event)


@router.get("", response_model=List[EventOut])
def list_events(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    project: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    rows = EventService().list_events(db, start=parse_datetime(start), end=parse_datetime(end), project_id=project)
    return [_out(row) for row in rows]


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    try:
        event = EventService().get_event(db, event_id)
    except EventNotFound:
        raise NotFoundError("EVENT_NOT_FOUND", "Event not found")
    return _out(event)


@router.put("/{event_id}", response_model=EventOut)
def update_event(event_id: str, body: EventUpdate, db: Session = Depends(get_db)):
    service = EventService()
    try:
        row = service.get_event(db, event_id)
    except EventNotFound:
        raise NotFoundError("EVENT_NOT_FOUND", "Event not found")

    # validate the merged range: a partial body is checked against the stored side
    start_at = parse_datetime(body.start) or row.start_at
    end_at = parse_datetime(body.end) or row.end_at
    if end_at < start_at:
        raise ValidationAppError("EVENT_INVALID_TIME", "end before start")

    event = service.update_event(
        db, event_id, title=body.title, start_at=start_at, end_at=end_at, **_fields(body)
    )
    return _out(event)


@router.delete("/{event_id}", status_code=204)
def delete_event(event_id: str, db: Session = Depends(get_db)):
    try:
        EventService().delete_event(db, event_id)
    except EventNotFound:
        raise NotFoundError("EVENT_NOT_FOUND", "Event not found")


@router.post("/{event_id}/reschedule", response_model=EventOut)
def reschedule_event(event_id: str, body: RescheduleIn, db: Session = Depends(get_db)):
    service = EventService()
    try:
        row = service.get_event(db, event_id)
    except EventNotFound:
        raise NotFoundError("EVENT_NOT_FOUND", "Event not found")

    result = reschedule(to_domain(row), body.kind, body.drop_date)
    DRAG_OUTCOMES.labels(kind=body.kind.value, outcome=result.outcome.value).inc()
    if result.outcome is DropOutcome.MISSING_IDENTIFIER:
        raise ConflictError("EVENT_MISSING_ID", result.reason)
    if not result.committed:
        raise DropRejectedError(result.reason)
    return _out(service.apply_reschedule(db, result.event))
