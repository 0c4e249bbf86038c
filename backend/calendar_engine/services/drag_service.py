"""Drag-and-drop rescheduling of calendar events.

A :class:`DragSession` tracks one gesture at a time::

    idle -> dragging -> committing | cancelled -> idle

Everything the gesture acquires from the surface (pointer listeners, the drag
indicator, drop highlights) is registered on one ``ExitStack`` when the drag
starts and released by a single teardown on every exit: drop, cancel, an
external drag-end, or leaving the session's ``with`` block.

The session never persists anything. A committed drop yields a replacement
:class:`CalendarEvent` with both identifier aliases set; the caller stores it.
"""
from __future__ import annotations

import dataclasses
import logging
from contextlib import ExitStack
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Callable, Optional

from ..adapters.null_drag_surface import NullDragSurface
from ..domain.enums import DragKind
from ..domain.event import CalendarEvent
from ..ports.drag_surface import DRAG_END, POINTER_MOVE, POINTER_UP, DragSurface
from .date_utils import to_midnight

logger = logging.getLogger(__name__)


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"
    CANCELLED = "cancelled"


class DropOutcome(str, Enum):
    COMMITTED = "committed"
    CANCELLED = "cancelled"
    MISSING_IDENTIFIER = "missing_identifier"


@dataclass(frozen=True)
class DropResult:
    outcome: DropOutcome
    event: Optional[CalendarEvent] = None
    reason: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.outcome is DropOutcome.COMMITTED


def is_valid_drop(kind: DragKind, candidate: Any, original_start: Any, original_end: Any) -> bool:
    """Date-only validation of a drop target for the given operation."""
    day = to_midnight(candidate)
    if day is None:
        return False
    if kind is DragKind.MOVE:
        return True
    if kind is DragKind.RESIZE_START:
        end = to_midnight(original_end)
        return end is not None and day <= end
    if kind is DragKind.RESIZE_END:
        start = to_midnight(original_start)
        return start is not None and day >= start
    return False


def compute_drop(kind: DragKind, candidate: Any, original_start: datetime,
                 original_end: datetime) -> Optional[tuple]:
    """New ``(start, end)`` for a drop on ``candidate``, keeping times of day.

    ``None`` when the candidate is unreadable or the result would fall outside
    the representable date range.
    """
    day = to_midnight(candidate)
    if day is None:
        return None
    try:
        if kind is DragKind.MOVE:
            new_start = datetime.combine(day.date(), original_start.time())
            return new_start, new_start + (original_end - original_start)
        if kind is DragKind.RESIZE_START:
            new_start = datetime.combine(day.date(), original_start.time())
            return new_start, max(original_end, new_start)
        if kind is DragKind.RESIZE_END:
            new_end = datetime.combine(day.date(), original_end.time())
            return original_start, max(new_end, original_start)
    except OverflowError:
        logger.debug("Drop on %s overflows the date range", day.date())
        return None
    return None


class DragSession:
    def __init__(
        self,
        surface: DragSurface | None = None,
        on_drop: Callable[[DropResult], None] | None = None,
    ):
        self.surface = surface or NullDragSurface()
        self.on_drop = on_drop
        self.state = DragState.IDLE
        self.event: Optional[CalendarEvent] = None
        self.kind: Optional[DragKind] = None
        self.original_start: Optional[datetime] = None
        self.original_end: Optional[datetime] = None
        self.candidate: Optional[date] = None
        self.candidate_valid = False
        self._resources: Optional[ExitStack] = None

    def __enter__(self) -> "DragSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.is_dragging:
            self.cancel()

    @property
    def is_dragging(self) -> bool:
        return self.state is DragState.DRAGGING

    def start(self, event: CalendarEvent, kind=DragKind.MOVE,
              x: Optional[float] = None, y: Optional[float] = None) -> bool:
        """Begin a gesture. An active gesture is cancelled first.

        Returns ``False`` (and stays idle) for an event without a readable start.
        """
        kind = DragKind(kind)
        if self.is_dragging:
            logger.debug("Drag already active for %s; cancelling it", self.event.identifier)
            self.cancel()
        if event.start is None:
            logger.debug("Refusing to drag event %s without a valid start", event.identifier)
            return False

        stack = ExitStack()
        try:
            for channel, handler in (
                (POINTER_MOVE, self._on_pointer_move),
                (POINTER_UP, self._on_pointer_up),
                (DRAG_END, self._on_drag_end),
            ):
                stack.callback(self.surface.subscribe(channel, handler).remove)
            stack.callback(self.surface.show_indicator(event).remove)
            stack.callback(self.surface.clear_highlights)
        except Exception:
            stack.close()
            raise

        self._resources = stack
        self.state = DragState.DRAGGING
        self.event = event
        self.kind = kind
        self.original_start = event.start
        self.original_end = event.effective_end
        self.candidate = None
        self.candidate_valid = False
        if x is not None and y is not None:
            self.surface.move_indicator(x, y)
        logger.debug("Drag %s started for event %s", kind.value, event.identifier)
        return True

    def start_resize(self, event: CalendarEvent, direction: str, **pointer) -> bool:
        kind = DragKind.RESIZE_START if direction == "start" else DragKind.RESIZE_END
        return self.start(event, kind, **pointer)

    def hover(self, candidate: Any) -> bool:
        """Track the day under the pointer; returns whether dropping there is allowed."""
        if not self.is_dragging:
            return False
        day = to_midnight(candidate)
        if day is None:
            self.leave()
            return False
        self.candidate = day.date()
        self.candidate_valid = is_valid_drop(self.kind, day, self.original_start, self.original_end)
        self.surface.clear_highlights()
        self.surface.highlight(self.candidate, self.candidate_valid)
        return self.candidate_valid

    def leave(self) -> None:
        if not self.is_dragging:
            return
        self.candidate = None
        self.candidate_valid = False
        self.surface.clear_highlights()

    def drop(self) -> DropResult:
        if not self.is_dragging:
            return DropResult(DropOutcome.CANCELLED, reason="no active drag")
        try:
            if self.candidate is None or not self.candidate_valid:
                self.state = DragState.CANCELLED
                result = DropResult(DropOutcome.CANCELLED, reason="invalid drop target")
            else:
                self.state = DragState.COMMITTING
                result = self._commit()
        finally:
            self._teardown()
        logger.debug("Drag finished: %s", result.outcome.value)
        if self.on_drop:
            self.on_drop(result)
        return result

    def cancel(self) -> DropResult:
        if self.is_dragging:
            self.state = DragState.CANCELLED
            self._teardown()
            logger.debug("Drag cancelled")
        return DropResult(DropOutcome.CANCELLED, reason="cancelled")

    def _commit(self) -> DropResult:
        computed = compute_drop(self.kind, self.candidate, self.original_start, self.original_end)
        if computed is None:
            return DropResult(DropOutcome.CANCELLED, reason="drop target out of range")
        new_start, new_end = computed
        proposed = dataclasses.replace(self.event, start=new_start, end=new_end)
        if proposed.identifier is None:
            logger.warning("Dropped event %r has no identifier; nothing to persist", proposed.title)
            return DropResult(DropOutcome.MISSING_IDENTIFIER, reason="event has no identifier")
        return DropResult(DropOutcome.COMMITTED, event=proposed.with_identifiers())

    def _teardown(self) -> None:
        resources, self._resources = self._resources, None
        try:
            if resources is not None:
                resources.close()
        finally:
            self.state = DragState.IDLE
            self.event = None
            self.kind = None
            self.original_start = None
            self.original_end = None
            self.candidate = None
            self.candidate_valid = False

    # Surface callbacks

    def _on_pointer_move(self, day: Optional[date] = None, x: Optional[float] = None,
                         y: Optional[float] = None) -> None:
        if x is not None and y is not None:
            self.surface.move_indicator(x, y)
        if day is None:
            self.leave()
        else:
            self.hover(day)

    def _on_pointer_up(self) -> None:
        self.drop()

    def _on_drag_end(self) -> None:
        self.cancel()


def reschedule(event: CalendarEvent, kind, drop_date: Any) -> DropResult:
    """Run one headless gesture: pick up ``event``, hover ``drop_date``, drop."""
    with DragSession() as session:
        if not session.start(event, kind):
            return DropResult(DropOutcome.CANCELLED, reason="event has no valid start")
        session.hover(drop_date)
        return session.drop()
