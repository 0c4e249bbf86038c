"""Resolve which events occupy a calendar day and how multi-day spans are laid out.

Occupancy is date-only: an event covers ``day`` when the day falls between the
midnight-truncated start and end (inclusive). Events without a readable start
are skipped so one bad record never hides the rest of the day.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from ..domain.enums import ViewMode
from ..domain.event import CalendarEvent
from .date_utils import current_time, days_between, to_midnight

MAX_VISIBLE = {ViewMode.MONTHLY: 3, ViewMode.WEEKLY: 10}


@dataclass(frozen=True)
class DayEventView:
    """An event as seen from one specific day of its span."""
    event: CalendarEvent
    is_first_day: bool
    is_last_day: bool
    is_multi_day: bool
    is_continuation: bool
    day_index: int
    total_days: int

    def to_record(self) -> Dict[str, Any]:
        record = self.event.to_record()
        record.update(
            isFirstDay=self.is_first_day,
            isLastDay=self.is_last_day,
            isMultiDay=self.is_multi_day,
            isContinuation=self.is_continuation,
            dayIndex=self.day_index,
            totalDays=self.total_days,
        )
        return record


@dataclass(frozen=True)
class VisibleEvents:
    shown: List[DayEventView]
    hidden: List[DayEventView]
    has_more: bool
    more_count: int
    total_count: int


@dataclass(frozen=True)
class EventLayout:
    multi_day: List[DayEventView]
    single_day: List[DayEventView]
    max_layers: int


@dataclass(frozen=True)
class EventStats:
    total_events: int
    multi_day_events: int
    single_day_events: int
    days_with_events: int
    average_events_per_day: float


def _project(event: CalendarEvent, target: datetime) -> Optional[DayEventView]:
    start = to_midnight(event.start)
    if start is None:
        return None
    end = to_midnight(event.effective_end)
    if not start <= target <= end:
        return None
    is_first_day = target == start
    is_multi_day = start != end
    return DayEventView(
        event=event,
        is_first_day=is_first_day,
        is_last_day=target == end,
        is_multi_day=is_multi_day,
        is_continuation=is_multi_day and not is_first_day,
        day_index=days_between(start, target),
        total_days=days_between(start, end) + 1,
    )


def events_for_day(day: Any, events: Iterable[CalendarEvent]) -> List[DayEventView]:
    """Events occupying ``day``, earliest start first; longer spans first on ties."""
    target = to_midnight(day)
    if target is None:
        return []
    views = [view for view in (_project(e, target) for e in events or []) if view is not None]
    views.sort(key=lambda v: (v.event.start, -v.total_days))
    return views


def day_event_count(day: Any, events: Iterable[CalendarEvent]) -> int:
    return len(events_for_day(day, events))


def has_events(day: Any, events: Iterable[CalendarEvent]) -> bool:
    return day_event_count(day, events) > 0


def visible_events(day: Any, events: Iterable[CalendarEvent], max_visible: Optional[int] = None,
                   view_mode=ViewMode.MONTHLY) -> VisibleEvents:
    """Split a day's events into what fits the cell and what goes behind "+N more"."""
    if max_visible is None:
        max_visible = MAX_VISIBLE[ViewMode.coerce(view_mode)]
    max_visible = max(0, max_visible)
    views = events_for_day(day, events)
    return VisibleEvents(
        shown=views[:max_visible],
        hidden=views[max_visible:],
        has_more=len(views) > max_visible,
        more_count=max(0, len(views) - max_visible),
        total_count=len(views),
    )


def events_starting_on(day: Any, events: Iterable[CalendarEvent]) -> List[DayEventView]:
    return [v for v in events_for_day(day, events) if v.is_first_day]


def events_ending_on(day: Any, events: Iterable[CalendarEvent]) -> List[DayEventView]:
    return [v for v in events_for_day(day, events) if v.is_last_day]


def multi_day_events(day: Any, events: Iterable[CalendarEvent]) -> List[DayEventView]:
    return [v for v in events_for_day(day, events) if v.is_multi_day]


def single_day_events(day: Any, events: Iterable[CalendarEvent]) -> List[DayEventView]:
    return [v for v in events_for_day(day, events) if not v.is_multi_day]


def event_layout(day: Any, events: Iterable[CalendarEvent]) -> EventLayout:
    views = events_for_day(day, events)
    multi = [v for v in views if v.is_multi_day]
    single = [v for v in views if not v.is_multi_day]
    return EventLayout(multi_day=multi, single_day=single, max_layers=max(len(multi), len(single)))


def event_stats(start: Any, end: Any, events: Iterable[CalendarEvent]) -> Optional[EventStats]:
    first = to_midnight(start)
    last = to_midnight(end)
    if first is None or last is None or last < first:
        return None
    events = list(events or [])
    total = multi = single = days_with = 0
    current = first
    while current <= last:
        views = events_for_day(current, events)
        if views:
            days_with += 1
            total += len(views)
            multi += sum(1 for v in views if v.is_multi_day)
            single += sum(1 for v in views if not v.is_multi_day)
        current += timedelta(days=1)
    span = days_between(first, last) + 1
    return EventStats(
        total_events=total,
        multi_day_events=multi,
        single_day_events=single,
        days_with_events=days_with,
        average_events_per_day=total / span,
    )


def _matches(event: CalendarEvent, term: str) -> bool:
    return term in event.title.lower() or term in (event.description or "").lower()


def search_events(term: Optional[str], events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    """Case-insensitive search over title and description of the whole collection."""
    candidates = [e for e in events or [] if e.start is not None]
    candidates.sort(key=lambda e: e.start)
    if not term:
        return candidates
    needle = term.lower()
    return [e for e in candidates if _matches(e, needle)]


def search_day_events(term: Optional[str], day: Any, events: Iterable[CalendarEvent]) -> List[DayEventView]:
    views = events_for_day(day, events)
    if not term:
        return views
    needle = term.lower()
    return [v for v in views if _matches(v.event, needle)]


def events_in_range(start: Any, end: Any, events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    """Events whose date span overlaps ``start..end`` (both inclusive, date-only)."""
    first = to_midnight(start)
    last = to_midnight(end)
    if first is None or last is None:
        return []
    hits = [
        e for e in events or []
        if e.start is not None
        and to_midnight(e.start) <= last and to_midnight(e.effective_end) >= first
    ]
    hits.sort(key=lambda e: e.start)
    return hits


def today_events(events: Iterable[CalendarEvent], now: Optional[datetime] = None) -> List[CalendarEvent]:
    return [v.event for v in events_for_day(now or current_time(), events)]


def upcoming_events(events: Iterable[CalendarEvent], now: Optional[datetime] = None,
                    limit: Optional[int] = 5) -> List[CalendarEvent]:
    """Events starting after today, soonest first."""
    today = to_midnight(now or current_time())
    future = [e for e in events or [] if e.start is not None and to_midnight(e.start) > today]
    future.sort(key=lambda e: e.start)
    return future if limit is None else future[:limit]
