"""
Read-only task records consumed by the advisory engine.

Tasks reach the advisor from several places: API payloads, the Django task
store, or plain dictionaries in tests. This module turns all of them into a
single immutable ``TaskRecord`` shape. Malformed fields never reject a task;
an unparseable deadline or an unknown priority is treated as absent.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone as dt_timezone
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework.fields import BooleanField


logger = logging.getLogger(__name__)


class Priority(str, Enum):
    """The four discrete priority classes a task can carry."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"

    @classmethod
    def parse(cls, value: Any) -> Optional["Priority"]:
        """Return the matching priority, or None for anything out of range."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


PRIORITY_CHOICES = [(p.value, p.value.title()) for p in Priority]


@dataclass(frozen=True)
class TaskRecord:
    """
    A task as seen by the advisor.

    Attributes:
        id: Opaque identifier from the task store
        title: Task title (may be empty)
        description: Optional free text
        priority: One of the Priority classes, or None when malformed
        category: Free-form category name
        deadline: Timezone-aware deadline, or None
        completed: Whether the task is done
        created_at: Creation instant, or None when unknown
    """
    id: str
    title: str
    description: Optional[str] = None
    priority: Optional[Priority] = Priority.NONE
    category: str = ""
    deadline: Optional[datetime] = None
    completed: bool = False
    created_at: Optional[datetime] = None

    def __post_init__(self):
        # Instants are always aware; naive values are read as UTC
        object.__setattr__(self, "deadline", parse_instant(self.deadline))
        object.__setattr__(self, "created_at", parse_instant(self.created_at))

    def is_overdue(self, now: datetime) -> bool:
        return self.deadline is not None and self.deadline < now and not self.completed


def parse_instant(value: Any) -> Optional[datetime]:
    """
    Parse a deadline-like value into an aware datetime.

    Accepts datetimes, dates (taken as midnight) and ISO 8601 strings,
    including a trailing ``Z``. Naive values are interpreted as UTC.

    Returns:
        The aware datetime, or None if the value is empty or unparseable.
    """
    if value is None or value == "":
        return None

    parsed = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = parse_datetime(text)
            if parsed is None:
                day = parse_date(text)
                if day is not None:
                    parsed = datetime.combine(day, time.min)
        except ValueError:
            parsed = None

    if parsed is None:
        return None

    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def parse_flag(value: Any) -> bool:
    """Interpret a completion flag; strings follow DRF's BooleanField."""
    if isinstance(value, str):
        return value.strip() in BooleanField.TRUE_VALUES
    return value is True or value == 1


def _get(source: Any, key: str, default: Any = None) -> Any:
    if isinstance(source, Mapping):
        return source.get(key, default)
    return getattr(source, key, default)


def to_record(source: Any, index: int = 0) -> TaskRecord:
    """
    Build a TaskRecord from a mapping or a model-like object.

    Both ``created_at`` and the original camelCase ``createdAt`` are
    accepted. Bad deadlines and priorities are logged and dropped.
    """
    task_id = _get(source, "id")
    task_id = str(task_id) if task_id is not None else f"task_{index}"

    raw_deadline = _get(source, "deadline")
    deadline = parse_instant(raw_deadline)
    if raw_deadline not in (None, "") and deadline is None:
        logger.debug("Ignoring unparseable deadline %r on task %s", raw_deadline, task_id)

    raw_priority = _get(source, "priority", Priority.NONE.value)
    priority = Priority.parse(raw_priority)
    if priority is None:
        logger.debug("Ignoring out-of-range priority %r on task %s", raw_priority, task_id)

    created_at = _get(source, "created_at")
    if created_at is None:
        created_at = _get(source, "createdAt")

    description = _get(source, "description")

    return TaskRecord(
        id=task_id,
        title=str(_get(source, "title") or ""),
        description=str(description) if description else None,
        priority=priority,
        category=str(_get(source, "category") or ""),
        deadline=deadline,
        completed=parse_flag(_get(source, "completed", False)),
        created_at=parse_instant(created_at),
    )


def to_records(tasks: Iterable[Any]) -> List[TaskRecord]:
    """Normalize an iterable of tasks, passing existing records through."""
    records = []
    for i, task in enumerate(tasks):
        if isinstance(task, TaskRecord):
            records.append(task)
        else:
            records.append(to_record(task, i))
    return records
