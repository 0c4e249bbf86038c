"""Date arithmetic shared by the grid, day resolver, status classifier and drag session.

Every helper is total: unparsable input produces a sentinel (``None``, ``False``
or ``0``) instead of raising. Calendar data is handled as naive wall-clock
datetimes; timezone-aware values are converted to UTC and made naive on the way
in so that stored and user-supplied values compare in one frame.
"""
from __future__ import annotations

import calendar
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

DAY_SECONDS = 24 * 60 * 60


def current_time() -> datetime:
    """System clock in the engine's frame (naive UTC)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse strings, dates, datetimes and epoch milliseconds; ``None`` when unparsable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            parsed = datetime.combine(value, time.min)
        elif isinstance(value, (int, float)):
            # Stored documents may carry JS timestamps (milliseconds since epoch).
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        elif isinstance(value, str):
            text = value.strip()
            if not text:
                return None
            try:
                parsed = date_parser.isoparse(text)
            except ValueError:
                parsed = date_parser.parse(text)
        else:
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed
    except (ValueError, OverflowError, OSError):
        return None


def is_valid_date(value: Any) -> bool:
    return parse_datetime(value) is not None


def to_midnight(value: Any) -> Optional[datetime]:
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return datetime.combine(parsed.date(), time.min)


def days_between(a: Any, b: Any) -> int:
    """Absolute whole-day difference after truncating both sides to midnight."""
    start = to_midnight(a)
    end = to_midnight(b)
    if start is None or end is None:
        return 0
    return math.ceil(abs((end - start).total_seconds()) / DAY_SECONDS)


def signed_days_between(a: Any, b: Any) -> Optional[int]:
    """``b - a`` in calendar days; ``None`` when either side is unparsable."""
    start = to_midnight(a)
    end = to_midnight(b)
    if start is None or end is None:
        return None
    return (end - start).days


def add_days(value: Any, days: int) -> Optional[datetime]:
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    try:
        return parsed + timedelta(days=days)
    except OverflowError:
        return None


def add_weeks(value: Any, weeks: int) -> Optional[datetime]:
    return add_days(value, weeks * 7)


def add_months(value: Any, months: int) -> Optional[datetime]:
    """Month arithmetic that clamps to the last day (Jan 31 + 1 month -> Feb 28/29)."""
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    try:
        return parsed + relativedelta(months=months)
    except (ValueError, OverflowError):
        return None


def start_of_week(value: Any, week_start: int = calendar.MONDAY) -> Optional[datetime]:
    midnight = to_midnight(value)
    if midnight is None:
        return None
    offset = (midnight.weekday() - week_start) % 7
    try:
        return midnight - timedelta(days=offset)
    except OverflowError:
        return None


def end_of_week(value: Any, week_start: int = calendar.MONDAY) -> Optional[datetime]:
    first = start_of_week(value, week_start)
    if first is None:
        return None
    try:
        return datetime.combine((first + timedelta(days=6)).date(), time.max)
    except OverflowError:
        return None


def iso_week_number(value: Any) -> int:
    parsed = parse_datetime(value)
    if parsed is None:
        return 0
    return parsed.isocalendar()[1]


def iso_week_year(value: Any) -> int:
    parsed = parse_datetime(value)
    if parsed is None:
        return 0
    return parsed.isocalendar()[0]


def iso_weeks_in_year(year: int) -> int:
    # Dec 28 always falls in the last ISO week of its year.
    return date(year, 12, 28).isocalendar()[1]


def is_this_week(value: Any, now: Optional[datetime] = None) -> bool:
    if not is_valid_date(value):
        return False
    now = now or current_time()
    return (iso_week_number(value), iso_week_year(value)) == (iso_week_number(now), iso_week_year(now))


def is_next_week(value: Any, now: Optional[datetime] = None) -> bool:
    if not is_valid_date(value):
        return False
    now = now or current_time()
    week, year = iso_week_number(value), iso_week_year(value)
    now_week, now_year = iso_week_number(now), iso_week_year(now)
    if now_week == iso_weeks_in_year(now_year):
        return week == 1 and year == now_year + 1
    return week == now_week + 1 and year == now_year


def is_same_day(a: Any, b: Any) -> bool:
    first = to_midnight(a)
    return first is not None and first == to_midnight(b)


def is_today(value: Any, now: Optional[datetime] = None) -> bool:
    return is_same_day(value, now or current_time())


def is_past(value: Any, now: Optional[datetime] = None) -> bool:
    """True for any day before today."""
    parsed = parse_datetime(value)
    if parsed is None:
        return False
    return parsed < to_midnight(now or current_time())


def is_future(value: Any, now: Optional[datetime] = None) -> bool:
    """True for any day after today."""
    parsed = parse_datetime(value)
    if parsed is None:
        return False
    today = (now or current_time()).date()
    return parsed > datetime.combine(today, time.max)


def is_weekend(value: Any) -> bool:
    parsed = parse_datetime(value)
    return parsed is not None and parsed.weekday() >= calendar.SATURDAY
