from __future__ import annotations
from datetime import date
from typing import Callable, Protocol

from ..domain.event import CalendarEvent

POINTER_MOVE = "pointer-move"
POINTER_UP = "pointer-up"
DRAG_END = "drag-end"


class Subscription(Protocol):
    """Handle for something acquired from the surface; ``remove`` releases it."""

    def remove(self) -> None: ...


class DragSurface(Protocol):
    """Abstracts the interactive surface a drag gesture runs on, for testability.

    Channels:
      ``pointer-move`` handler(day: date | None, x: float | None, y: float | None)
      ``pointer-up``   handler()
      ``drag-end``     handler()   (gesture aborted outside any drop target)
    """

    def subscribe(self, channel: str, handler: Callable[..., None]) -> Subscription:
        ...

    def show_indicator(self, event: CalendarEvent) -> Subscription:
        """Display the floating drag indicator; removing the handle hides it."""
        ...

    def move_indicator(self, x: float, y: float) -> None:
        ...

    def highlight(self, day: date, valid: bool) -> None:
        ...

    def clear_highlights(self) -> None:
        ...
