from datetime import datetime

import pytest

from calendar_engine.domain.enums import ViewMode
from calendar_engine.domain.event import CalendarEvent
from calendar_engine.services import day_events_service as des


def ev(ident, start, end=None, title=None, description=""):
    return CalendarEvent.from_record({
        "id": ident, "title": title or ident, "start": start, "end": end, "description": description,
    })


@pytest.fixture
def events():
    return [
        ev("conf", "2024-06-10T09:00", "2024-06-12T17:00", title="Conference", description="Annual PyCon"),
        ev("standup", "2024-06-11T09:00", "2024-06-11T09:15", title="Standup"),
        ev("lunch", "2024-06-11T12:00", "2024-06-11T13:00", title="Lunch with Sam"),
        ev("broken", "nope", title="Broken"),
        ev("offsite", "2024-06-11T09:00", "2024-06-14T12:00", title="Offsite"),
    ]


def test_multi_day_span_indices(events):
    conf = [e for e in events if e.id == "conf"]
    views = [des.events_for_day(f"2024-06-{d}", conf)[0] for d in (10, 11, 12)]
    assert [v.day_index for v in views] == [0, 1, 2]
    assert {v.total_days for v in views} == {3}
    assert views[0].is_first_day and not views[0].is_continuation
    assert views[1].is_continuation and not views[1].is_last_day
    assert views[2].is_last_day and views[2].is_multi_day


def test_single_day_event_flags(events):
    views = des.events_for_day("2024-06-11", [e for e in events if e.id == "lunch"])
    assert len(views) == 1
    view = views[0]
    assert view.is_first_day and view.is_last_day
    assert not view.is_multi_day and not view.is_continuation
    assert (view.day_index, view.total_days) == (0, 1)


def test_day_outside_span_has_no_events(events):
    assert des.events_for_day("2024-06-09", events) == []
    assert des.events_for_day("2024-06-15", events) == []


def test_ordering_by_start_then_longer_span_first(events):
    views = des.events_for_day("2024-06-11", events)
    # conf started earlier; offsite and standup tie at 09:00 and the longer span wins
    assert [v.event.id for v in views] == ["conf", "offsite", "standup", "lunch"]


def test_invalid_events_are_skipped_not_fatal(events):
    assert des.day_event_count("2024-06-11", events) == 4
    assert des.has_events("2024-06-11", events)
    assert des.events_for_day("garbage", events) == []


def test_visible_events_overflow_defaults_per_view(events):
    visible = des.visible_events("2024-06-11", events)
    assert len(visible.shown) == 3
    assert visible.has_more and visible.more_count == 1 and visible.total_count == 4
    assert [v.event.id for v in visible.hidden] == ["lunch"]

    weekly = des.visible_events("2024-06-11", events, view_mode=ViewMode.WEEKLY)
    assert not weekly.has_more and weekly.more_count == 0


def test_visible_events_explicit_limit(events):
    visible = des.visible_events("2024-06-11", events, max_visible=0)
    assert visible.shown == [] and visible.more_count == 4


def test_starting_and_ending_filters(events):
    assert [v.event.id for v in des.events_starting_on("2024-06-11", events)] == ["offsite", "standup", "lunch"]
    assert [v.event.id for v in des.events_ending_on("2024-06-12", events)] == ["conf"]


def test_layout_partitions_multi_and_single(events):
    layout = des.event_layout("2024-06-11", events)
    assert [v.event.id for v in layout.multi_day] == ["conf", "offsite"]
    assert [v.event.id for v in layout.single_day] == ["standup", "lunch"]
    assert layout.max_layers == 2
    assert len(des.multi_day_events("2024-06-11", events)) == 2
    assert len(des.single_day_events("2024-06-11", events)) == 2


def test_event_stats_over_range(events):
    stats = des.event_stats("2024-06-10", "2024-06-16", events)
    # 10: conf | 11: conf, offsite, standup, lunch | 12: conf, offsite | 13, 14: offsite
    assert stats.total_events == 9
    assert stats.multi_day_events == 7
    assert stats.single_day_events == 2
    assert stats.days_with_events == 5
    assert stats.average_events_per_day == pytest.approx(9 / 7)
    assert des.event_stats("2024-06-16", "2024-06-10", events) is None


def test_search_title_and_description(events):
    assert [e.id for e in des.search_events("pycon", events)] == ["conf"]
    assert [e.id for e in des.search_events("SAM", events)] == ["lunch"]
    assert len(des.search_events("", events)) == 4
    assert [v.event.id for v in des.search_day_events("stand", "2024-06-11", events)] == ["standup"]


def test_events_in_range_is_inclusive_overlap(events):
    assert [e.id for e in des.events_in_range("2024-06-12", "2024-06-12", events)] == ["conf", "offsite"]
    assert des.events_in_range("2024-06-15", "2024-06-20", events) == []


def test_today_and_upcoming(events):
    now = datetime(2024, 6, 10, 12, 0)
    assert [e.id for e in des.today_events(events, now)] == ["conf"]
    assert [e.id for e in des.upcoming_events(events, now)] == ["standup", "offsite", "lunch"]
    assert [e.id for e in des.upcoming_events(events, now, limit=1)] == ["standup"]


def test_view_record_carries_span_fields(events):
    record = des.events_for_day("2024-06-11", events)[0].to_record()
    assert record["id"] == record["_id"] == "conf"
    assert record["dayIndex"] == 1
    assert record["totalDays"] == 3
    assert record["isContinuation"] is True
