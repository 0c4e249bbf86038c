from __future__ import annotations
from datetime import date
from typing import Callable, Dict, List

from ..domain.event import CalendarEvent
from ..ports.drag_surface import DragSurface, Subscription


class _Handle:
    def __init__(self, release: Callable[[], None]):
        self._release = release
        self.removed = False

    def remove(self) -> None:
        if not self.removed:
            self.removed = True
            self._release()


class NullDragSurface(DragSurface):
    """Headless surface: keeps listener bookkeeping but draws nothing.

    Used by the reschedule endpoint, and by tests that need to assert every
    listener and indicator acquired by a session was released again.
    """

    def __init__(self):
        self.listeners: Dict[str, List[Callable[..., None]]] = {}
        self.indicator_visible = False
        self.highlighted: Dict[date, bool] = {}

    def subscribe(self, channel: str, handler: Callable[..., None]) -> Subscription:
        self.listeners.setdefault(channel, []).append(handler)

        def release():
            handlers = self.listeners.get(channel, [])
            if handler in handlers:
                handlers.remove(handler)
            if not handlers:
                self.listeners.pop(channel, None)

        return _Handle(release)

    def show_indicator(self, event: CalendarEvent) -> Subscription:
        self.indicator_visible = True

        def release():
            self.indicator_visible = False

        return _Handle(release)

    def move_indicator(self, x: float, y: float) -> None:
        return None

    def highlight(self, day: date, valid: bool) -> None:
        self.highlighted[day] = valid

    def clear_highlights(self) -> None:
        self.highlighted.clear()

    def emit(self, channel: str, *args) -> None:
        for handler in list(self.listeners.get(channel, [])):
            handler(*args)

    @property
    def listener_count(self) -> int:
        return sum(len(h) for h in self.listeners.values())
