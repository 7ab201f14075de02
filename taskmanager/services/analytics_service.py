"""Productivity analytics over windows of completed and created tasks.

A task's completion instant is ``completed_at``; "hours to complete" is
``completed_at - created_at``. All derived floats are rounded to two
decimals.
"""
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List

from taskmanager.errors import ValidationError
from taskmanager.models.task import Task, TaskCategory, TaskPriority
from taskmanager.repositories.base import TaskRepository
from taskmanager.schemas.task import (
    CompletionTimes,
    DailyCompletion,
    ProductivityInsights,
    TaskAnalytics,
)
from taskmanager.utils.datetime import Clock, utcnow
from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)

INSIGHTS_WINDOW_DAYS = 30
STREAK_LOOKBACK_DAYS = 30
MAX_WINDOW_DAYS = 365
FALLBACK_CATEGORY = TaskCategory.OTHER.value

# Enumeration order decides ties for the best day
WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def hours_to_complete(task: Task) -> float:
    return (task.completed_at - task.created_at).total_seconds() / 3600


def mean_hours(tasks: List[Task]) -> float:
    if not tasks:
        return 0.0
    return sum(hours_to_complete(task) for task in tasks) / len(tasks)


def percent_change(current: int, previous: int) -> float:
    """Change relative to ``previous``; 0 when there is nothing to compare to."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def completion_streak(days: Iterable[date], today: date, lookback: int = STREAK_LOOKBACK_DAYS) -> int:
    """Consecutive days with a completion, counting back from ``today``."""
    active = set(days)
    streak = 0
    for offset in range(lookback):
        if today - timedelta(days=offset) not in active:
            break
        streak += 1
    return streak


def best_weekday(instants: Iterable[datetime]) -> str:
    counts = [0] * 7
    for instant in instants:
        # datetime.weekday() is Monday=0; shift to a Sunday-first week
        counts[(instant.weekday() + 1) % 7] += 1
    return WEEKDAY_NAMES[counts.index(max(counts))]


class AnalyticsService:
    """Computes windowed metrics for one user from repository period queries."""

    def __init__(self, tasks: TaskRepository, clock: Clock = utcnow):
        self.tasks = tasks
        self.clock = clock

    def get_analytics(self, user_id: str, window_days: int) -> TaskAnalytics:
        if window_days < 1 or window_days > MAX_WINDOW_DAYS:
            raise ValidationError(f"Window must be between 1 and {MAX_WINDOW_DAYS} days")

        logger.info("Generating task analytics", user_id=user_id, window_days=window_days)

        end = self.clock()
        start = end - timedelta(days=window_days)

        completed = self.tasks.completed_in_period(user_id, start, end)
        created = self.tasks.created_in_period(user_id, start, end)

        per_day = Counter(task.completed_at.date() for task in completed)
        over_time = [DailyCompletion(date=day, count=count) for day, count in sorted(per_day.items())]

        by_category = Counter(task.category for task in completed)
        by_priority = Counter(task.priority for task in completed)

        previous = self.tasks.completed_in_period(user_id, start - timedelta(days=window_days), start)
        trend = percent_change(len(completed), len(previous))

        logger.debug(
            "Task analytics generated successfully",
            user_id=user_id,
            completed=len(completed),
            created=len(created),
            previous=len(previous),
        )

        return TaskAnalytics(
            completed_tasks_over_time=over_time,
            tasks_by_category=dict(by_category),
            tasks_by_priority=dict(by_priority),
            average_completion_time=round(mean_hours(completed), 2),
            productivity_trend=round(trend, 2),
            total_tasks_in_period=len(created),
            completed_tasks_in_period=len(completed),
        )

    def get_productivity_insights(self, user_id: str) -> ProductivityInsights:
        logger.info("Generating productivity insights", user_id=user_id)

        end = self.clock()
        start = end - timedelta(days=INSIGHTS_WINDOW_DAYS)

        completed = self.tasks.completed_in_period(user_id, start, end)
        totals = self.tasks.stats_for(user_id, end).by_category

        ranked = self._rank_categories(completed, totals)
        most = ranked[0] if ranked else FALLBACK_CATEGORY
        least = ranked[-1] if ranked else FALLBACK_CATEGORY

        time_to_complete = {
            priority.value: round(mean_hours([t for t in completed if t.priority == priority.value]), 2)
            for priority in TaskPriority
        }

        streak = completion_streak((t.completed_at.date() for t in completed), end.date())

        logger.debug(
            "Productivity insights generated successfully",
            user_id=user_id,
            streak_days=streak,
            ranked_categories=len(ranked),
        )

        return ProductivityInsights(
            most_productive_category=most,
            least_productive_category=least,
            average_tasks_per_day=round(len(completed) / INSIGHTS_WINDOW_DAYS, 2),
            best_completion_day=best_weekday(t.completed_at for t in completed),
            recommended_focus=least,
            streak_days=streak,
            time_to_complete=CompletionTimes(**time_to_complete),
        )

    @staticmethod
    def _rank_categories(completed: List[Task], totals: Dict[str, int]) -> List[str]:
        """Categories holding any task, best window completion rate first."""
        completions = Counter(task.category for task in completed)
        rates = [
            (category.value, completions[category.value] / totals[category.value])
            for category in TaskCategory
            if totals.get(category.value, 0) > 0
        ]
        # Stable sort keeps enumeration order among equal rates
        rates.sort(key=lambda item: item[1], reverse=True)
        return [category for category, _ in rates]
