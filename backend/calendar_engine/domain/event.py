"""Canonical calendar event shape.

Stored documents arrive in several legacy shapes (``title`` or ``name``, ``id``
or ``_id``, camelCase or snake_case keys, ISO strings or datetimes). They are
normalized here, once, so the engine only ever sees :class:`CalendarEvent`.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar

from ..services.date_utils import parse_datetime
from .enums import ConfirmationStatus, EventType, Priority, RecurrenceFrequency

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

DEFAULT_COLOR = "#1976D2"


def _pick(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return default


def _coerce_enum(enum_cls: Type[E], value: Any, default: E) -> E:
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower()
    for member in enum_cls:
        if member.value.lower() == text:
            return member
    logger.debug("Unknown %s value %r; using %s", enum_cls.__name__, value, getattr(default, "value", None))
    return default


def _as_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


@dataclass
class Recurrence:
    enabled: bool = False
    frequency: Optional[RecurrenceFrequency] = None
    interval: int = 1
    end_date: Optional[str] = None

    @classmethod
    def from_record(cls, data: Any) -> Optional["Recurrence"]:
        if not isinstance(data, Mapping):
            return None
        frequency = _pick(data, "frequency")
        try:
            interval = max(1, int(_pick(data, "interval", default=1)))
        except (TypeError, ValueError):
            interval = 1
        return cls(
            enabled=bool(_pick(data, "enabled", default=False)),
            frequency=_coerce_enum(RecurrenceFrequency, frequency, None) if frequency else None,
            interval=interval,
            end_date=_as_str(_pick(data, "endDate", "end_date")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "frequency": self.frequency.value if self.frequency else None,
            "interval": self.interval,
            "endDate": self.end_date,
        }


@dataclass
class CalendarEvent:
    title: str
    start: Optional[datetime]
    end: Optional[datetime] = None
    id: Optional[str] = None
    legacy_id: Optional[str] = None  # "_id" alias used by document stores
    description: str = ""
    all_day: bool = False
    color: str = DEFAULT_COLOR
    type: EventType = EventType.MEETING
    priority: Priority = Priority.MEDIUM
    status: ConfirmationStatus = ConfirmationStatus.CONFIRMED
    location: str = ""
    attendees: List[str] = field(default_factory=list)
    reminders: List[str] = field(default_factory=list)
    recurring: Optional[Recurrence] = None
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    start_time: Optional[str] = None  # legacy "HH:MM" display strings
    end_time: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CalendarEvent":
        """Build the canonical event from a stored or submitted document.

        An inverted range (end before start) is clamped to a zero-length event
        instead of being rejected; historical records may already be malformed.
        """
        start = parse_datetime(_pick(record, "start", "start_at", "startAt"))
        end = parse_datetime(_pick(record, "end", "end_at", "endAt"))
        event = cls(
            title=str(_pick(record, "title", "name", default="")),
            start=start,
            end=end,
            id=_as_str(_pick(record, "id")),
            legacy_id=_as_str(_pick(record, "_id")),
            description=str(_pick(record, "description", "details", default="")),
            all_day=bool(_pick(record, "allDay", "all_day", default=False)),
            color=str(_pick(record, "color", default=DEFAULT_COLOR)),
            type=_coerce_enum(EventType, _pick(record, "type"), EventType.MEETING),
            priority=_coerce_enum(Priority, _pick(record, "priority"), Priority.MEDIUM),
            status=_coerce_enum(ConfirmationStatus, _pick(record, "status"), ConfirmationStatus.CONFIRMED),
            location=str(_pick(record, "location", default="")),
            attendees=[str(a) for a in _pick(record, "attendees", default=[]) or []],
            reminders=[str(r) for r in _pick(record, "reminders", default=[]) or []],
            recurring=Recurrence.from_record(_pick(record, "recurring")),
            project_id=_as_str(_pick(record, "projectId", "project_id")),
            task_id=_as_str(_pick(record, "taskId", "task_id")),
            start_time=_as_str(_pick(record, "startTime", "start_time")),
            end_time=_as_str(_pick(record, "endTime", "end_time")),
        )
        if start is not None and end is not None and end < start:
            logger.warning("Event %s ends before it starts; clamping end to start", event.identifier or event.title)
            event.end = start
        return event

    @property
    def identifier(self) -> Optional[str]:
        return self.id or self.legacy_id

    @property
    def effective_end(self) -> Optional[datetime]:
        return self.end or self.start

    @property
    def is_valid(self) -> bool:
        return self.start is not None

    def with_identifiers(self) -> "CalendarEvent":
        """Copy with ``id`` and ``legacy_id`` both set to the resolved identifier."""
        ident = self.identifier
        return dataclasses.replace(self, id=ident, legacy_id=ident)

    def to_record(self) -> Dict[str, Any]:
        ident = self.identifier
        return {
            "id": ident,
            "_id": ident,
            "title": self.title,
            "description": self.description,
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "allDay": self.all_day,
            "type": self.type.value,
            "priority": self.priority.value,
            "status": self.status.value,
            "location": self.location,
            "attendees": list(self.attendees),
            "color": self.color,
            "recurring": self.recurring.to_record() if self.recurring else None,
            "reminders": list(self.reminders),
            "projectId": self.project_id,
            "taskId": self.task_id,
        }


def normalize_events(records: Iterable[Any]) -> List[CalendarEvent]:
    """Normalize a collection; a record that cannot be read is skipped, not fatal."""
    events: List[CalendarEvent] = []
    for index, record in enumerate(records or []):
        if isinstance(record, CalendarEvent):
            events.append(record)
            continue
        try:
            events.append(CalendarEvent.from_record(record))
        except (AttributeError, TypeError, ValueError) as exc:
            logger.warning("Skipping unreadable event record at index %d: %s", index, exc)
    return events
