"""Month / week day-grid construction and period navigation.

Weeks always start on Monday (ISO), whatever the display locale.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from ..domain.enums import ViewMode
from .date_utils import add_months, add_weeks, current_time, is_today, parse_datetime
from .time_formatter import format_date_short, format_month_short, format_month_year

MONTH_GRID_CELLS = 42  # 6 rows x 7 columns
WEEKDAY_LABELS = ["M", "T", "W", "T", "F", "S", "S"]
FULL_WEEKDAY_LABELS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


@dataclass(frozen=True)
class DayCell:
    date: date
    is_current_month: bool
    is_previous_month: bool
    is_next_month: bool

    def to_dict(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "isCurrentMonth": self.is_current_month,
            "isPreviousMonth": self.is_previous_month,
            "isNextMonth": self.is_next_month,
            "isToday": is_today(self.date, now or current_time()),
        }


def weekday_labels(full: bool = False) -> List[str]:
    return list(FULL_WEEKDAY_LABELS if full else WEEKDAY_LABELS)


def _cell(day: date, focus: date) -> DayCell:
    key, focus_key = (day.year, day.month), (focus.year, focus.month)
    return DayCell(
        date=day,
        is_current_month=key == focus_key,
        is_previous_month=key < focus_key,
        is_next_month=key > focus_key,
    )


def _monthly(focus: date) -> List[DayCell]:
    first = focus.replace(day=1)
    grid_start = first - timedelta(days=first.weekday())
    return [_cell(grid_start + timedelta(days=i), focus) for i in range(MONTH_GRID_CELLS)]


def _weekly(focus: date) -> List[DayCell]:
    monday = focus - timedelta(days=focus.weekday())
    return [_cell(monday + timedelta(days=i), focus) for i in range(7)]


def build_grid(reference: Any, view_mode=ViewMode.MONTHLY) -> List[DayCell]:
    """Ordered day cells for the visible range; empty when ``reference`` is unparsable."""
    parsed = parse_datetime(reference)
    if parsed is None:
        return []
    try:
        if ViewMode.coerce(view_mode) is ViewMode.WEEKLY:
            return _weekly(parsed.date())
        return _monthly(parsed.date())
    except OverflowError:
        # Grids that would run past date.min / date.max
        return []


def navigate(reference: Any, view_mode=ViewMode.MONTHLY, periods: int = 1) -> Optional[datetime]:
    """Shift ``reference`` by whole months or weeks; negative periods move backwards."""
    if ViewMode.coerce(view_mode) is ViewMode.WEEKLY:
        return add_weeks(reference, periods)
    return add_months(reference, periods)


def current_range(reference: Any, view_mode=ViewMode.MONTHLY) -> Optional[Tuple[date, date]]:
    """Focused period: first..last day of the month, or Monday..Sunday of the week."""
    parsed = parse_datetime(reference)
    if parsed is None:
        return None
    focus = parsed.date()
    if ViewMode.coerce(view_mode) is ViewMode.WEEKLY:
        monday = focus - timedelta(days=focus.weekday())
        return monday, monday + timedelta(days=6)
    first = focus.replace(day=1)
    following = add_months(first, 1)
    return first, (following.date() - timedelta(days=1)) if following else first


def view_title(reference: Any, view_mode=ViewMode.MONTHLY, locale: Optional[str] = None) -> str:
    parsed = parse_datetime(reference)
    if parsed is None:
        return ""
    if ViewMode.coerce(view_mode) is ViewMode.MONTHLY:
        return format_month_year(parsed, locale)
    start, end = current_range(parsed, ViewMode.WEEKLY)
    if (start.year, start.month) == (end.year, end.month):
        return f"{format_month_short(start, locale)} {start.day}-{end.day}, {parsed.year}"
    return f"{format_date_short(start, locale)} - {format_date_short(end, locale)}, {parsed.year}"


def can_navigate_prev(reference: Any, view_mode=ViewMode.MONTHLY, min_date: Any = None) -> bool:
    if min_date is None:
        return True
    bounds = current_range(reference, view_mode)
    limit = parse_datetime(min_date)
    if bounds is None or limit is None:
        return False
    return bounds[0] > limit.date()


def can_navigate_next(reference: Any, view_mode=ViewMode.MONTHLY, max_date: Any = None) -> bool:
    if max_date is None:
        return True
    bounds = current_range(reference, view_mode)
    limit = parse_datetime(max_date)
    if bounds is None or limit is None:
        return False
    return bounds[1] < limit.date()
