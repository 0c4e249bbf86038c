"""Classify events into human-relevant time buckets for the today / upcoming lists.

Each list context has its own handler:

* ``today``   - compares "now" with the exact start/end instants
                (Upcoming -> Ongoing -> Completed).
* ``upcoming`` - compares calendar days, then ISO weeks, then calendar months
                (Today, Tomorrow, Soon, This Week, Next Week, This Month,
                Next Month, Later). Week checks run before month checks, so a
                date later in the current month can still read "Next Week".

An event without a readable start is always ``Invalid``.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional

from dateutil.relativedelta import relativedelta

from ..domain.enums import ListContext, Urgency
from ..domain.event import CalendarEvent
from .date_utils import current_time, is_next_week, is_this_week, signed_days_between

SOON_DAYS = 3
MEDIUM_URGENCY_DAYS = 7


class StatusLabel(Enum):
    COMPLETED = ("Completed", "success")
    ONGOING = ("Ongoing", "warning")
    UPCOMING = ("Upcoming", "info")
    TODAY = ("Today", "warning")
    TOMORROW = ("Tomorrow", "warning")
    SOON = ("Soon", "info")
    THIS_WEEK = ("This Week", "primary")
    NEXT_WEEK = ("Next Week", "primary")
    THIS_MONTH = ("This Month", "secondary")
    NEXT_MONTH = ("Next Month", "secondary")
    LATER = ("Later", "primary")
    INVALID = ("Invalid", "error")

    def __init__(self, text: str, color: str):
        self.text = text
        self.color = color


@dataclass(frozen=True)
class EventStatus:
    label: StatusLabel

    @property
    def text(self) -> str:
        return self.label.text

    @property
    def color(self) -> str:
        return self.label.color

    def to_dict(self) -> Dict[str, str]:
        return {"text": self.text, "color": self.color}


def today_status(event: CalendarEvent, now: datetime) -> EventStatus:
    if event.start is None:
        return EventStatus(StatusLabel.INVALID)
    if now > event.effective_end:
        return EventStatus(StatusLabel.COMPLETED)
    if now >= event.start:
        return EventStatus(StatusLabel.ONGOING)
    return EventStatus(StatusLabel.UPCOMING)


def upcoming_status(event: CalendarEvent, now: datetime) -> EventStatus:
    if event.start is None:
        return EventStatus(StatusLabel.INVALID)
    start = event.start
    diff_days = signed_days_between(now, start)
    if diff_days <= 0:
        return EventStatus(StatusLabel.TODAY)
    if diff_days == 1:
        return EventStatus(StatusLabel.TOMORROW)
    if diff_days <= SOON_DAYS:
        return EventStatus(StatusLabel.SOON)
    if is_this_week(start, now):
        return EventStatus(StatusLabel.THIS_WEEK)
    if is_next_week(start, now):
        return EventStatus(StatusLabel.NEXT_WEEK)
    if (start.year, start.month) == (now.year, now.month):
        return EventStatus(StatusLabel.THIS_MONTH)
    following = now + relativedelta(months=1)
    if (start.year, start.month) == (following.year, following.month):
        return EventStatus(StatusLabel.NEXT_MONTH)
    return EventStatus(StatusLabel.LATER)


HANDLERS: Dict[ListContext, Callable[[CalendarEvent, datetime], EventStatus]] = {
    ListContext.TODAY: today_status,
    ListContext.UPCOMING: upcoming_status,
}


def classify(event: CalendarEvent, context=ListContext.UPCOMING, now: Optional[datetime] = None) -> EventStatus:
    return HANDLERS[ListContext.coerce(context)](event, now or current_time())


def urgency(event: CalendarEvent, now: Optional[datetime] = None) -> Urgency:
    diff_days = signed_days_between(now or current_time(), event.start)
    if diff_days is None:
        return Urgency.LOW
    if diff_days <= SOON_DAYS:
        return Urgency.HIGH
    if diff_days <= MEDIUM_URGENCY_DAYS:
        return Urgency.MEDIUM
    return Urgency.LOW


def is_overdue(event: CalendarEvent, now: Optional[datetime] = None) -> bool:
    return event.start is not None and (now or current_time()) > event.effective_end


def is_active(event: CalendarEvent, now: Optional[datetime] = None) -> bool:
    if event.start is None:
        return False
    now = now or current_time()
    return event.start <= now <= event.effective_end


def is_upcoming(event: CalendarEvent, now: Optional[datetime] = None) -> bool:
    return event.start is not None and event.start > (now or current_time())


def status_types() -> List[str]:
    return [label.text.lower() for label in StatusLabel if label is not StatusLabel.INVALID]
