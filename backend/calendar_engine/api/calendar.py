"""Read-only calendar views computed by the engine over stored events."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from typing import Optional

from ..db.session import get_db
from ..domain.enums import ListContext, ViewMode
from ..services import day_events_service, grid_service, status_service, time_formatter
from ..services.date_utils import current_time, to_midnight
from ..services.event_service import EventService

router = APIRouter(prefix="/calendar", tags=["calendar"])


def get_now() -> datetime:
    """Overridable clock (tests pin "now" through dependency_overrides)."""
    return current_time()


@router.get("/grid")
def calendar_grid(
    date: Optional[str] = Query(None, description="Reference date; defaults to today"),
    view: ViewMode = Query(ViewMode.MONTHLY),
    max_visible: Optional[int] = Query(None, alias="maxVisible", ge=0, le=50),
    locale: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    reference = date or now
    cells = grid_service.build_grid(reference, view)
    if not cells:
        return {"view": view.value, "title": "", "days": []}

    window_start = to_midnight(cells[0].date)
    window_end = to_midnight(cells[-1].date) + timedelta(days=1)
    events = EventService().load_calendar_events(db, start=window_start, end=window_end)

    days = []
    for cell in cells:
        visible = day_events_service.visible_events(cell.date, events, max_visible=max_visible, view_mode=view)
        day = cell.to_dict(now)
        day.update(
            events=[v.to_record() for v in visible.shown],
            hasMore=visible.has_more,
            moreCount=visible.more_count,
            totalCount=visible.total_count,
        )
        days.append(day)
    return {
        "view": view.value,
        "title": grid_service.view_title(reference, view, locale),
        "weekdays": grid_service.weekday_labels(),
        "days": days,
    }


@router.get("/day")
def day_events(
    date: str = Query(..., description="Day to resolve"),
    q: Optional[str] = Query(None, description="Free-text filter on title/description"),
    db: Session = Depends(get_db),
):
    day = to_midnight(date)
    if day is None:
        return {"date": None, "events": []}
    events = EventService().load_calendar_events(db, start=day, end=day + timedelta(days=1))
    views = day_events_service.search_day_events(q, day, events)
    return {"date": day.date().isoformat(), "events": [v.to_record() for v in views]}


@router.get("/list")
def event_list(
    context: ListContext = Query(ListContext.UPCOMING),
    limit: int = Query(5, ge=1, le=100),
    locale: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    events = EventService().load_calendar_events(db)
    if context is ListContext.TODAY:
        selected = day_events_service.today_events(events, now)
    else:
        selected = day_events_service.upcoming_events(events, now, limit=limit)

    items = []
    for event in selected:
        record = event.to_record()
        record.update(
            statusLabel=status_service.classify(event, context, now).to_dict(),
            urgency=status_service.urgency(event, now).value,
            timeLabel=time_formatter.format_event_time(event, context, locale, now),
            duration=time_formatter.format_duration(event),
            dateRange=time_formatter.format_date_range(event, locale),
            relative=time_formatter.format_relative_time(event, now),
            isAllDay=time_formatter.is_all_day(event),
        )
        items.append(record)
    return {"context": context.value, "events": items}
