"""Human-facing time, duration and date-range labels for calendar events.

Locale tags are BCP-47 strings (``en-US``). Month and weekday names come from
Babel's CLDR data; an unknown tag falls back to ``CALENDAR_DEFAULT_LOCALE``.
"""
from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Optional

from babel import Locale, UnknownLocaleError
from babel.dates import format_date as babel_format_date

from ..domain.enums import ListContext
from ..domain.event import CalendarEvent
from .date_utils import current_time, is_same_day, parse_datetime, signed_days_between

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = os.getenv("CALENDAR_DEFAULT_LOCALE", "en-US")


def resolve_locale(tag: Optional[str]) -> Locale:
    try:
        return Locale.parse((tag or DEFAULT_LOCALE).replace("_", "-"), sep="-")
    except (UnknownLocaleError, ValueError, TypeError):
        logger.debug("Unknown locale %r; using %s", tag, DEFAULT_LOCALE)
        return Locale.parse(DEFAULT_LOCALE.replace("_", "-"), sep="-")


def _format(value, pattern: str, locale: Optional[str]) -> str:
    parsed = parse_datetime(value)
    if parsed is None:
        return ""
    return babel_format_date(parsed.date(), format=pattern, locale=resolve_locale(locale))


def format_date(value, locale: Optional[str] = None) -> str:
    """Long form, e.g. ``Monday, June 10, 2024``."""
    return _format(value, "EEEE, MMMM d, y", locale)


def format_date_short(value, locale: Optional[str] = None) -> str:
    return _format(value, "MMM d", locale)


def format_month_year(value, locale: Optional[str] = None) -> str:
    return _format(value, "MMMM y", locale)


def format_month_short(value, locale: Optional[str] = None) -> str:
    return _format(value, "MMM", locale)


def format_weekday(value, locale: Optional[str] = None) -> str:
    return _format(value, "EEEE", locale)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def is_all_day(event: CalendarEvent) -> bool:
    if event.start is None:
        return False
    if event.all_day or event.end is None or event.end == event.start:
        return True
    return (
        event.start.hour == 0 and event.start.minute == 0
        and event.end.hour == 0 and event.end.minute == 0
    )


def format_duration(event: CalendarEvent) -> str:
    if event.start is None:
        return "Invalid duration"
    if event.end is None or event.end == event.start:
        return "All day"
    seconds = (event.end - event.start).total_seconds()
    if seconds <= 0:
        return "Invalid duration"
    hours, minutes = divmod(int(seconds // 60), 60)
    if hours == 0:
        return _plural(minutes, "minute")
    if minutes == 0:
        return _plural(hours, "hour")
    return f"{hours}h {minutes}m"


def format_date_range(event: CalendarEvent, locale: Optional[str] = None) -> str:
    if event.start is None:
        return "Invalid date"
    start_label = format_date_short(event.start, locale)
    if event.end is None or is_same_day(event.start, event.end):
        return start_label
    return f"{start_label} - {format_date_short(event.end, locale)}"


def format_relative_time(event: CalendarEvent, now: Optional[datetime] = None) -> str:
    """Distance from ``now`` to the event start in its largest non-zero unit.

    Units are truncated toward zero on both sides of ``now``: 36 hours ahead is
    "in 1 day" and 36 hours back is "1 day ago".
    """
    if event.start is None:
        return "Invalid time"
    delta = (event.start - (now or current_time())).total_seconds()
    remaining = int(abs(delta))
    days, remaining = divmod(remaining, 24 * 60 * 60)
    hours, remaining = divmod(remaining, 60 * 60)
    minutes = remaining // 60
    if days:
        label = _plural(days, "day")
    elif hours:
        label = _plural(hours, "hour")
    else:
        label = _plural(minutes, "minute")
    return f"{label} ago" if delta < 0 else f"in {label}"


def format_clock(value) -> str:
    parsed = parse_datetime(value)
    return parsed.strftime("%H:%M") if parsed else ""


def format_today_event_time(event: CalendarEvent) -> str:
    if event.start is None:
        return "Invalid time"
    if event.start_time and event.end_time:
        return f"{event.start_time} - {event.end_time}"
    if event.all_day:
        return "All day"
    if event.end is None:
        return "Invalid time"
    return f"{format_clock(event.start)} - {format_clock(event.end)}"


def format_upcoming_event_time(event: CalendarEvent, locale: Optional[str] = None,
                               now: Optional[datetime] = None) -> str:
    if event.start is None:
        return "Invalid date"
    diff = signed_days_between(now or current_time(), event.start)
    if diff == 0:
        label = "Today"
    elif diff == 1:
        label = "Tomorrow"
    elif abs(diff) <= 7:
        label = format_weekday(event.start, locale)
    else:
        label = format_date_short(event.start, locale)
    if event.start_time:
        return f"{label} at {event.start_time}"
    return label


def format_event_time(event: CalendarEvent, context=ListContext.UPCOMING,
                      locale: Optional[str] = None, now: Optional[datetime] = None) -> str:
    if ListContext.coerce(context) is ListContext.TODAY:
        return format_today_event_time(event)
    return format_upcoming_event_time(event, locale, now)
