"""Task service: owner-scoped CRUD, filtered listing and statistics."""
from typing import List, Sequence

from taskmanager.errors import NotFoundError, ValidationError
from taskmanager.models.task import Task
from taskmanager.repositories.base import StatsBundle, TaskRepository, UserRepository
from taskmanager.schemas.task import (
    PaginatedTasks,
    Pagination,
    TaskCreate,
    TaskFilter,
    TaskResponse,
    TaskStats,
    TaskUpdate,
)
from taskmanager.utils.datetime import Clock, to_naive_utc, utcnow
from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20

# Columns that cannot be cleared through an update
NON_NULLABLE_FIELDS = ("title", "completed", "priority", "category", "is_archived")


def completion_rate(completed: int, total: int) -> int:
    """Whole-number percentage of completed tasks, 0 for an empty set."""
    if total <= 0:
        return 0
    return round(completed / total * 100)


def build_stats(bundle: StatsBundle) -> TaskStats:
    return TaskStats(
        total=bundle.total,
        completed=bundle.completed,
        pending=bundle.pending,
        overdue=bundle.overdue,
        archived=bundle.archived,
        completion_rate=completion_rate(bundle.completed, bundle.total),
        category_stats=dict(bundle.by_category),
        priority_stats=dict(bundle.by_priority),
        upcoming_tasks=bundle.upcoming,
    )


class TaskService:
    """Service class for task operations, always scoped to one owner."""

    def __init__(
        self,
        tasks: TaskRepository,
        users: UserRepository,
        clock: Clock = utcnow,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = 100,
    ):
        self.tasks = tasks
        self.users = users
        self.clock = clock
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def list_tasks(self, user_id: str, filters: TaskFilter) -> PaginatedTasks:
        """One page of the user's tasks plus pagination metadata and stats."""
        logger.debug("Fetching tasks for user", user_id=user_id, filters=filters.model_dump(mode="json"))

        limit = min(filters.limit or self.default_page_size, self.max_page_size)
        offset = filters.offset or 0
        page_filters = filters.model_copy(update={"limit": limit, "offset": offset})

        items, total = self.tasks.find_by_owner(user_id, page_filters)
        stats = self.get_stats(user_id)

        pagination = Pagination(
            total=total,
            limit=limit,
            offset=offset,
            has_next=offset + limit < total,
            has_prev=offset > 0,
        )

        logger.debug("Tasks fetched successfully", user_id=user_id, count=len(items), total=total)
        return PaginatedTasks(
            tasks=[TaskResponse.model_validate(task) for task in items],
            pagination=pagination,
            stats=stats,
        )

    def get_stats(self, user_id: str) -> TaskStats:
        return build_stats(self.tasks.stats_for(user_id, self.clock()))

    def get_task(self, task_id: int, user_id: str) -> Task:
        task = self.tasks.find_by_id(task_id)
        if not task or task.user_id != user_id:
            # Same answer for missing and foreign tasks
            logger.warning("Task lookup failed - not found or not owned", task_id=task_id, user_id=user_id)
            raise NotFoundError("Task not found")
        return task

    def create_task(self, user_id: str, data: TaskCreate) -> Task:
        logger.info("Creating new task", user_id=user_id, title=data.title)

        if not self.users.find_by_id(user_id):
            logger.warning("Task creation failed - user not found", user_id=user_id)
            raise NotFoundError("User not found")

        task = self.tasks.create(user_id, {
            "title": data.title,
            "description": data.description,
            "priority": data.priority,
            "category": data.category,
            "tags": list(data.tags),
            "due_date": data.due_date,
            "completed": False,
            "is_archived": False,
        })

        logger.info("Task created successfully", user_id=user_id, task_id=task.id)
        return task

    def update_task(self, task_id: int, user_id: str, updates: TaskUpdate) -> Task:
        changes = self._changes(updates)
        logger.info("Updating task", task_id=task_id, user_id=user_id, fields=sorted(changes))

        task = self.get_task(task_id, user_id)
        self._apply(task, changes)

        task = self.tasks.save(task)
        logger.info("Task updated successfully", task_id=task_id, user_id=user_id)
        return task

    def toggle_complete(self, task_id: int, user_id: str) -> Task:
        task = self.get_task(task_id, user_id)
        task.mark_completed(not task.completed, self.clock())
        task = self.tasks.save(task)
        logger.info("Task completion toggled", task_id=task_id, user_id=user_id, completed=task.completed)
        return task

    def delete_task(self, task_id: int, user_id: str) -> None:
        logger.info("Deleting task", task_id=task_id, user_id=user_id)

        if not self.tasks.delete(task_id, user_id):
            logger.warning("Task deletion failed - not found or not owned", task_id=task_id, user_id=user_id)
            raise NotFoundError("Task not found")

        logger.info("Task deleted successfully", task_id=task_id, user_id=user_id)

    def bulk_update(self, user_id: str, task_ids: Sequence[int], updates: TaskUpdate) -> List[Task]:
        """Update every listed task the user owns; foreign ids are skipped."""
        changes = self._changes(updates)
        logger.info("Bulk updating tasks", user_id=user_id, task_ids=list(task_ids), fields=sorted(changes))

        if not task_ids:
            raise ValidationError("No task IDs provided")
        if not changes:
            raise ValidationError("No updates provided")

        updated = self.tasks.bulk_update(list(dict.fromkeys(task_ids)), user_id, changes)

        logger.info("Tasks bulk updated successfully", user_id=user_id, updated_count=len(updated))
        return updated

    def get_overdue_tasks(self, user_id: str) -> List[Task]:
        logger.info("Fetching overdue tasks", user_id=user_id)
        overdue = self.tasks.overdue_for(user_id, self.clock())
        logger.debug("Overdue tasks fetched successfully", user_id=user_id, count=len(overdue))
        return overdue

    def _changes(self, updates: TaskUpdate) -> dict:
        changes = updates.changes()
        for key in NON_NULLABLE_FIELDS:
            if key in changes and changes[key] is None:
                raise ValidationError(f"{key} must not be null")
        if changes.get("tags") is None and "tags" in changes:
            changes["tags"] = []
        if changes.get("due_date") is not None:
            changes["due_date"] = to_naive_utc(changes["due_date"])
        return changes

    def _apply(self, task: Task, changes: dict) -> None:
        for key, value in changes.items():
            if key == "completed":
                task.mark_completed(value, self.clock())
            else:
                setattr(task, key, value)
