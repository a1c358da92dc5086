"""Read-only view of the task store for the advisor."""

from typing import Iterator, Optional

from .models import Task
from .records import TaskRecord, to_record


def iter_task_records(category: Optional[str] = None) -> Iterator[TaskRecord]:
    """
    Yield stored tasks as TaskRecords, newest first.

    Args:
        category: Only yield tasks in this category. ``None`` or the
                  reserved value ``"all"`` yields every task.
    """
    queryset = Task.objects.all()
    if category and category != 'all':
        queryset = queryset.filter(category=category)

    for i, task in enumerate(queryset.iterator()):
        yield to_record(task, i)
