"""Domain enumerations for strong typing & validation."""
from enum import Enum


class EventType(str, Enum):
    MEETING = "meeting"
    WORK = "work"
    SOCIAL = "social"
    MILESTONE = "milestone"
    DEADLINE = "deadline"


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ConfirmationStatus(str, Enum):
    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    CANCELLED = "cancelled"


class RecurrenceFrequency(str, Enum):
    # Descriptor only; occurrences are never expanded.
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class ViewMode(str, Enum):
    MONTHLY = "monthly"
    WEEKLY = "weekly"

    @classmethod
    def coerce(cls, value) -> "ViewMode":
        """Unknown or missing modes render as a month, like the calendar default."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.MONTHLY


class ListContext(str, Enum):
    TODAY = "today"
    UPCOMING = "upcoming"

    @classmethod
    def coerce(cls, value) -> "ListContext":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UPCOMING


class DragKind(str, Enum):
    MOVE = "move"
    RESIZE_START = "resize-start"
    RESIZE_END = "resize-end"


class Urgency(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
