"""
Task Model for the Smart Task Advisor.

The advisor only reads tasks; creating and editing them belongs to the task
management front end. The model mirrors the fields the advisor consumes.
"""

import uuid

from django.db import models

from .records import PRIORITY_CHOICES, Priority


class Task(models.Model):
    """
    A unit of work owned by the task management front end.

    Attributes:
        title: The task's title
        description: Optional free text
        priority: One of high, medium, low or none
        category: Free-form category name ("all" is reserved by the filters)
        deadline: When the task is due (optional)
        completed: Whether the task is done
        created_at: Timestamp of task creation
    """

    id = models.CharField(
        max_length=64,
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Opaque task identifier"
    )
    title = models.CharField(max_length=255, help_text="Task title")
    description = models.TextField(blank=True, null=True)
    priority = models.CharField(
        max_length=10,
        choices=PRIORITY_CHOICES,
        default=Priority.NONE.value
    )
    category = models.CharField(max_length=100, default="general")
    deadline = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Task deadline (optional)"
    )
    completed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} ({self.priority})"
