"""Task data models.

Rows come out of sqlite as plain dicts; Task.from_row() turns one into
typed values (date, time, enums) so callers never parse strings.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any


class TaskPriority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskSource(str, Enum):
    """How a task entered the system."""

    MANUAL = "manual"
    VOICE = "voice"
    CHAT = "chat"


class ReminderInterval(str, Enum):
    """How long before the due moment a reminder fires."""

    ONE_DAY = "1day"
    TWELVE_HOURS = "12hrs"
    SIX_HOURS = "6hrs"
    ONE_HOUR = "1hr"

    @property
    def delta(self) -> timedelta:
        return _INTERVAL_DELTAS[self]

    @property
    def display_name(self) -> str:
        return _INTERVAL_NAMES[self]


_INTERVAL_DELTAS = {
    ReminderInterval.ONE_DAY: timedelta(days=1),
    ReminderInterval.TWELVE_HOURS: timedelta(hours=12),
    ReminderInterval.SIX_HOURS: timedelta(hours=6),
    ReminderInterval.ONE_HOUR: timedelta(hours=1),
}

_INTERVAL_NAMES = {
    ReminderInterval.ONE_DAY: "1 day before",
    ReminderInterval.TWELVE_HOURS: "12 hours before",
    ReminderInterval.SIX_HOURS: "6 hours before",
    ReminderInterval.ONE_HOUR: "1 hour before",
}


def format_due_time(value: time | None) -> str | None:
    """Storage format for times of day. Minute precision, no seconds."""
    return value.strftime("%H:%M") if value is not None else None


def parse_due_time(value: str | None) -> time | None:
    if not value:
        return None
    return datetime.strptime(value, "%H:%M").time()


@dataclass
class Task:
    """A persisted task."""

    id: str
    user_id: str
    title: str
    description: str | None = None
    category_id: str | None = None
    due_date: date | None = None
    due_time: time | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    source: TaskSource = TaskSource.MANUAL
    is_completed: bool = False
    has_reminder: bool = False
    reminder_intervals: list[ReminderInterval] = field(default_factory=list)
    original_text: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    completed_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Task:
        intervals = json.loads(row.get("reminder_intervals") or "[]")
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row.get("description"),
            category_id=row.get("category_id"),
            due_date=date.fromisoformat(row["due_date"]) if row.get("due_date") else None,
            due_time=parse_due_time(row.get("due_time")),
            priority=TaskPriority(row.get("priority") or TaskPriority.MEDIUM.value),
            source=TaskSource(row.get("source") or TaskSource.MANUAL.value),
            is_completed=bool(row.get("is_completed")),
            has_reminder=bool(row.get("has_reminder")),
            reminder_intervals=[ReminderInterval(i) for i in intervals],
            original_text=row.get("original_text"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            completed_at=row.get("completed_at"),
        )

    @property
    def due_at(self) -> datetime | None:
        """Due moment; a date without a time is due at the end of that day."""
        if self.due_date is None:
            return None
        return datetime.combine(self.due_date, self.due_time or time(23, 59))

    def is_overdue(self, now: datetime) -> bool:
        due = self.due_at
        return not self.is_completed and due is not None and now > due

    def reminder_times(self) -> list[datetime]:
        """When each reminder fires, earliest first."""
        due = self.due_at
        if not self.has_reminder or due is None:
            return []
        return sorted(due - interval.delta for interval in self.reminder_intervals)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "category_id": self.category_id,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "due_time": format_due_time(self.due_time),
            "priority": self.priority.value,
            "source": self.source.value,
            "is_completed": self.is_completed,
            "has_reminder": self.has_reminder,
            "reminder_intervals": [i.value for i in self.reminder_intervals],
            "original_text": self.original_text,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "completed_at": self.completed_at,
        }
