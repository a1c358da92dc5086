"""
Productivity insights over a collection of tasks.

The analyzer reduces a task list into a few statistics (completion rate,
overdue count, priority distribution, category spread) and turns them into
templated insight and recommendation strings. Strings are emitted verbatim
because clients display them as-is.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, Optional, Tuple

from django.utils import timezone

from .records import Priority, to_records


NO_TASKS_INSIGHT = "No tasks available for analysis"
NO_TASKS_RECOMMENDATION = "Start by adding some tasks to get personalized insights"

OVERDUE_RECOMMENDATION = "Focus on completing overdue tasks to improve your productivity"
BREAK_DOWN_RECOMMENDATION = "Consider breaking down high-priority tasks into smaller, manageable steps"
POMODORO_RECOMMENDATION = "Try the Pomodoro Technique: work for 25 minutes, then take a 5-minute break"
CONSOLIDATE_RECOMMENDATION = "Consider consolidating similar categories to better organize your tasks"
GREAT_JOB_INSIGHT = "Great job! You're maintaining excellent productivity"

LOW_COMPLETION_RATE = 50
HIGH_COMPLETION_RATE = 80
MAX_CATEGORIES = 5


def completion_percent(completed: int, total: int) -> int:
    """Completion rate as a whole percentage, halves rounded up."""
    if total <= 0:
        return 0
    return int(math.floor(completed * 100 / total + 0.5))


@dataclass(frozen=True)
class PortfolioStats:
    """Aggregate figures for a task collection."""
    total: int = 0
    completed: int = 0
    overdue: int = 0
    due_today: int = 0
    high_priority_pending: int = 0
    completion_rate: int = 0
    priority_counts: Dict[str, int] = field(default_factory=dict)
    category_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def pending(self) -> int:
        return self.total - self.completed

    @property
    def top_category(self) -> Optional[Tuple[str, int]]:
        if not self.category_counts:
            return None
        return Counter(self.category_counts).most_common(1)[0]

    def to_dict(self) -> Dict:
        top = self.top_category
        return {
            'total_tasks': self.total,
            'completed_tasks': self.completed,
            'pending_tasks': self.pending,
            'overdue_tasks': self.overdue,
            'due_today': self.due_today,
            'high_priority_pending': self.high_priority_pending,
            'completion_rate': self.completion_rate,
            'priority_distribution': dict(self.priority_counts),
            'category_distribution': dict(self.category_counts),
            'top_category': {'name': top[0], 'count': top[1]} if top else None,
        }


@dataclass(frozen=True)
class PortfolioReport:
    """Insights and recommendations derived from a task collection."""
    insights: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            'insights': list(self.insights),
            'recommendations': list(self.recommendations),
        }


EMPTY_REPORT = PortfolioReport(
    insights=(NO_TASKS_INSIGHT,),
    recommendations=(NO_TASKS_RECOMMENDATION,)
)


def compute_stats(tasks: Iterable, now: datetime) -> PortfolioStats:
    """
    Reduce tasks into aggregate statistics.

    Tasks with a malformed priority are left out of the priority
    distribution but still count everywhere else.
    """
    records = to_records(tasks)
    today = timezone.localtime(now).date()

    priority_counts = {p.value: 0 for p in Priority}
    category_counts: Counter = Counter()
    completed = overdue = due_today = high_pending = 0

    for task in records:
        if task.completed:
            completed += 1
        if task.is_overdue(now):
            overdue += 1
        if task.deadline is not None and timezone.localtime(task.deadline).date() == today:
            due_today += 1
        if task.priority is not None:
            priority_counts[task.priority.value] += 1
            if task.priority == Priority.HIGH and not task.completed:
                high_pending += 1
        category_counts[task.category] += 1

    return PortfolioStats(
        total=len(records),
        completed=completed,
        overdue=overdue,
        due_today=due_today,
        high_priority_pending=high_pending,
        completion_rate=completion_percent(completed, len(records)),
        priority_counts=priority_counts,
        category_counts=dict(category_counts),
    )


class PortfolioAnalyzer:
    """Derives insights and recommendations from portfolio statistics."""

    def analyze(self, tasks: Iterable, now: datetime) -> PortfolioReport:
        """
        Analyze a task collection.

        Statements are appended in a fixed order: completion, overdue,
        priority balance, completion rate, category spread.

        Args:
            tasks: TaskRecords, mappings or model instances
            now: Reference instant for overdue detection

        Returns:
            PortfolioReport (the placeholder pair for an empty collection)
        """
        records = to_records(tasks)
        if not records:
            return EMPTY_REPORT
        return self.report(compute_stats(records, now))

    def report(self, stats: PortfolioStats) -> PortfolioReport:
        if stats.total == 0:
            return EMPTY_REPORT

        insights = []
        recommendations = []
        rate = stats.completion_rate

        insights.append(
            f"You have completed {stats.completed} out of {stats.total} tasks "
            f"({rate}% completion rate)"
        )

        if stats.overdue > 0:
            insights.append(f"You have {stats.overdue} overdue tasks that need attention")
            recommendations.append(OVERDUE_RECOMMENDATION)

        counts = stats.priority_counts
        high = counts.get(Priority.HIGH.value, 0)
        if high > counts.get(Priority.MEDIUM.value, 0) + counts.get(Priority.LOW.value, 0):
            recommendations.append(BREAK_DOWN_RECOMMENDATION)

        if rate < LOW_COMPLETION_RATE:
            recommendations.append(POMODORO_RECOMMENDATION)
        elif rate > HIGH_COMPLETION_RATE:
            insights.append(GREAT_JOB_INSIGHT)

        if len(stats.category_counts) > MAX_CATEGORIES:
            recommendations.append(CONSOLIDATE_RECOMMENDATION)

        return PortfolioReport(insights=tuple(insights), recommendations=tuple(recommendations))
