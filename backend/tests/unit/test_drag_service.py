from datetime import date, datetime

import pytest

from calendar_engine.adapters.null_drag_surface import NullDragSurface
from calendar_engine.domain.enums import DragKind
from calendar_engine.domain.event import CalendarEvent
from calendar_engine.ports.drag_surface import DRAG_END, POINTER_MOVE, POINTER_UP
from calendar_engine.services.drag_service import (
    DragSession,
    DragState,
    DropOutcome,
    compute_drop,
    is_valid_drop,
    reschedule,
)


@pytest.fixture
def meeting():
    return CalendarEvent(
        title="Planning", id="evt-1",
        start=datetime(2024, 6, 10, 9, 0), end=datetime(2024, 6, 10, 10, 0),
    )


@pytest.fixture
def surface():
    return NullDragSurface()


def assert_released(surface):
    assert surface.listener_count == 0
    assert surface.indicator_visible is False
    assert surface.highlighted == {}


def test_move_keeps_time_of_day_and_duration(meeting):
    result = reschedule(meeting, DragKind.MOVE, date(2024, 6, 15))
    assert result.committed
    assert result.event.start == datetime(2024, 6, 15, 9, 0)
    assert result.event.end == datetime(2024, 6, 15, 10, 0)


def test_committed_drop_carries_both_identifier_aliases():
    legacy = CalendarEvent(title="Legacy", legacy_id="mongo-1",
                           start=datetime(2024, 6, 10, 9), end=datetime(2024, 6, 10, 10))
    result = reschedule(legacy, "move", "2024-06-11")
    assert result.event.id == result.event.legacy_id == "mongo-1"
    assert result.event.to_record()["_id"] == "mongo-1"


def test_event_without_identifier_is_not_committed(meeting):
    anonymous = CalendarEvent(title="Anon", start=meeting.start, end=meeting.end)
    result = reschedule(anonymous, DragKind.MOVE, "2024-06-11")
    assert result.outcome is DropOutcome.MISSING_IDENTIFIER
    assert result.event is None


def test_resize_start_after_end_is_rejected(meeting):
    assert not is_valid_drop(DragKind.RESIZE_START, "2024-06-11", meeting.start, meeting.end)
    result = reschedule(meeting, DragKind.RESIZE_START, "2024-06-11")
    assert result.outcome is DropOutcome.CANCELLED


def test_resize_end_before_start_is_rejected(meeting):
    assert not is_valid_drop(DragKind.RESIZE_END, "2024-06-09", meeting.start, meeting.end)


def test_resize_start_earlier_day(meeting):
    result = reschedule(meeting, DragKind.RESIZE_START, "2024-06-08")
    assert result.event.start == datetime(2024, 6, 8, 9, 0)
    assert result.event.end == datetime(2024, 6, 10, 10, 0)


def test_resize_end_later_day(meeting):
    result = reschedule(meeting, DragKind.RESIZE_END, "2024-06-12")
    assert result.event.start == datetime(2024, 6, 10, 9, 0)
    assert result.event.end == datetime(2024, 6, 12, 10, 0)


def test_resize_onto_same_day_never_inverts():
    event = CalendarEvent(title="Late", id="x", start=datetime(2024, 6, 10, 18), end=datetime(2024, 6, 11, 9))
    new_start, new_end = compute_drop(DragKind.RESIZE_START, "2024-06-11", event.start, event.end)
    assert new_start == datetime(2024, 6, 11, 18)
    assert new_end >= new_start


def test_session_lifecycle_releases_everything(meeting, surface):
    dropped = []
    session = DragSession(surface, on_drop=dropped.append)
    assert session.start(meeting, DragKind.MOVE, x=10, y=20)
    assert session.state is DragState.DRAGGING
    assert surface.listener_count == 3
    assert surface.indicator_visible

    assert session.hover("2024-06-12")
    assert surface.highlighted == {date(2024, 6, 12): True}

    result = session.drop()
    assert result.committed
    assert session.state is DragState.IDLE
    assert dropped == [result]
    assert_released(surface)


def test_pointer_events_drive_the_session(meeting, surface):
    session = DragSession(surface)
    session.start(meeting, DragKind.RESIZE_END)
    surface.emit(POINTER_MOVE, date(2024, 6, 9), 5, 5)
    assert surface.highlighted == {date(2024, 6, 9): False}
    surface.emit(POINTER_MOVE, None, 6, 6)
    assert surface.highlighted == {}
    surface.emit(POINTER_MOVE, date(2024, 6, 11), 7, 7)
    surface.emit(POINTER_UP)
    assert session.state is DragState.IDLE
    assert_released(surface)


def test_external_drag_end_cancels(meeting, surface):
    dropped = []
    session = DragSession(surface, on_drop=dropped.append)
    session.start(meeting)
    session.hover("2024-06-12")
    surface.emit(DRAG_END)
    assert session.state is DragState.IDLE
    assert dropped == []
    assert_released(surface)


def test_drop_without_target_is_cancelled(meeting, surface):
    session = DragSession(surface)
    session.start(meeting)
    result = session.drop()
    assert result.outcome is DropOutcome.CANCELLED
    assert_released(surface)


def test_starting_again_cancels_active_drag(meeting, surface):
    session = DragSession(surface)
    session.start(meeting)
    other = CalendarEvent(title="Other", id="evt-2", start=datetime(2024, 6, 11, 9))
    assert session.start(other, DragKind.MOVE)
    assert session.event is other
    assert surface.listener_count == 3


def test_invalid_start_refuses_drag(surface):
    broken = CalendarEvent(title="Broken", id="b", start=None)
    session = DragSession(surface)
    assert session.start(broken) is False
    assert session.state is DragState.IDLE
    assert_released(surface)


def test_leaving_with_block_tears_down(meeting, surface):
    with DragSession(surface) as session:
        session.start_resize(meeting, "start")
        assert session.kind is DragKind.RESIZE_START
    assert session.state is DragState.IDLE
    assert_released(surface)


def test_teardown_runs_even_when_block_raises(meeting, surface):
    with pytest.raises(RuntimeError):
        with DragSession(surface) as session:
            session.start(meeting)
            raise RuntimeError("boom")
    assert_released(surface)


def test_on_drop_callback_failure_still_leaves_session_idle(meeting, surface):
    def explode(result):
        raise ValueError("store failed")

    session = DragSession(surface, on_drop=explode)
    session.start(meeting)
    session.hover("2024-06-12")
    with pytest.raises(ValueError):
        session.drop()
    assert session.state is DragState.IDLE
    assert_released(surface)


def test_hover_while_idle_is_ignored(surface):
    session = DragSession(surface)
    assert session.hover("2024-06-12") is False
    assert session.drop().outcome is DropOutcome.CANCELLED


def test_drop_past_the_representable_range_is_cancelled(surface):
    two_days = CalendarEvent(title="Retreat", id="r-1",
                             start=datetime(2024, 6, 10, 9), end=datetime(2024, 6, 12, 9))
    assert compute_drop(DragKind.MOVE, "9999-12-31", two_days.start, two_days.end) is None

    session = DragSession(surface)
    session.start(two_days, DragKind.MOVE)
    assert session.hover("9999-12-31")
    result = session.drop()
    assert result.outcome is DropOutcome.CANCELLED
    assert result.event is None
    assert session.state is DragState.IDLE
    assert_released(surface)
