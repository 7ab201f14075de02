"""SQLModel implementation of the task repository."""
import json
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import String, case, cast, func
from sqlmodel import Session, select

from taskmanager.models.task import PRIORITY_RANK, Task, TaskCategory, TaskPriority
from taskmanager.repositories.base import StatsBundle, TaskRepository
from taskmanager.schemas.task import SortOrder, TaskFilter, TaskSortField, TaskStatusFilter
from taskmanager.utils.datetime import Clock, to_naive_utc, utcnow

UPCOMING_WINDOW = timedelta(days=7)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce enums to values and aware datetimes to naive UTC."""
    out = {}
    for key, value in data.items():
        if isinstance(value, (TaskPriority, TaskCategory)):
            value = value.value
        elif isinstance(value, datetime):
            value = to_naive_utc(value)
        out[key] = value
    return out


class SqlTaskRepository(TaskRepository):
    """Task persistence over a single SQLModel session."""

    def __init__(self, session: Session, clock: Clock = utcnow):
        self.session = session
        self.clock = clock

    def find_by_id(self, task_id: int) -> Optional[Task]:
        return self.session.get(Task, task_id)

    @property
    def _is_sqlite(self) -> bool:
        return self.session.get_bind().dialect.name == "sqlite"

    def _contains(self, haystack, needle: str):
        """Case-sensitive substring test; LIKE folds ASCII case on SQLite."""
        if self._is_sqlite:
            return func.instr(haystack, needle) > 0
        return func.strpos(haystack, needle) > 0

    def _matches_search(self, column, term: str):
        """Case-insensitive substring test over a text column."""
        if self._is_sqlite:
            # SQLite's lower() only folds ASCII; casefold is registered by build_engine
            pattern = f"%{_escape_like(term.casefold())}%"
            return func.casefold(column).like(pattern, escape="\\")
        return column.ilike(f"%{_escape_like(term)}%", escape="\\")

    def _filtered(self, owner_id: str, filters: TaskFilter):
        # Owner scope first; filters can only narrow it
        statement = select(Task).where(Task.user_id == owner_id)

        if filters.status == TaskStatusFilter.PENDING:
            statement = statement.where(Task.completed == False)  # noqa: E712
        elif filters.status == TaskStatusFilter.COMPLETED:
            statement = statement.where(Task.completed == True)  # noqa: E712

        if filters.category is not None:
            statement = statement.where(Task.category == filters.category.value)

        if filters.priority is not None:
            statement = statement.where(Task.priority == filters.priority.value)

        if filters.tags:
            # Every requested tag must appear as a whole JSON array element, exact case
            tags_text = cast(Task.tags, String)
            for tag in filters.tags:
                statement = statement.where(self._contains(tags_text, json.dumps(tag)))

        if filters.is_archived is not None:
            statement = statement.where(Task.is_archived == filters.is_archived)

        if filters.search:
            statement = statement.where(
                self._matches_search(Task.title, filters.search) |
                (Task.description.is_not(None) & self._matches_search(Task.description, filters.search))
            )

        return statement

    def _ordered(self, statement, filters: TaskFilter):
        ascending = filters.sort_order == SortOrder.ASC

        if filters.sort_by == TaskSortField.PRIORITY:
            key = case(
                (Task.priority == TaskPriority.HIGH.value, PRIORITY_RANK["high"]),
                (Task.priority == TaskPriority.MEDIUM.value, PRIORITY_RANK["medium"]),
                else_=PRIORITY_RANK["low"],
            )
        elif filters.sort_by == TaskSortField.TITLE:
            key = Task.title
        elif filters.sort_by == TaskSortField.UPDATED_AT:
            key = Task.updated_at
        elif filters.sort_by == TaskSortField.DUE_DATE:
            key = Task.due_date
        else:
            key = Task.created_at

        order = key.asc() if ascending else key.desc()
        if filters.sort_by == TaskSortField.DUE_DATE:
            order = order.nulls_last()

        # Id as tie-breaker keeps pages stable
        tie_breaker = Task.id.asc() if ascending else Task.id.desc()
        return statement.order_by(order, tie_breaker)

    def find_by_owner(self, owner_id: str, filters: TaskFilter) -> Tuple[List[Task], int]:
        statement = self._filtered(owner_id, filters)

        # Count before pagination
        total = self.session.exec(
            select(func.count()).select_from(statement.subquery())
        ).one()

        statement = self._ordered(statement, filters)
        if filters.offset:
            statement = statement.offset(filters.offset)
        if filters.limit is not None:
            statement = statement.limit(filters.limit)

        return list(self.session.exec(statement).all()), total

    def create(self, owner_id: str, data: Dict[str, Any]) -> Task:
        values = _normalize(data)
        now = self.clock()
        values.setdefault("created_at", now)
        values.setdefault("updated_at", values["created_at"])
        if values.get("completed") and values.get("completed_at") is None:
            values["completed_at"] = now

        task = Task(user_id=owner_id, **values)
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        return task

    def save(self, task: Task) -> Task:
        task.updated_at = self.clock()
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        return task

    def delete(self, task_id: int, owner_id: str) -> bool:
        statement = select(Task).where(Task.id == task_id, Task.user_id == owner_id)
        task = self.session.exec(statement).first()
        if not task:
            return False

        self.session.delete(task)
        self.session.commit()
        return True

    def bulk_update(self, task_ids: Sequence[int], owner_id: str, changes: Dict[str, Any]) -> List[Task]:
        if not task_ids:
            return []

        statement = (
            select(Task)
            .where(Task.id.in_(list(task_ids)))
            .where(Task.user_id == owner_id)
            .order_by(Task.id.asc())
        )
        tasks = list(self.session.exec(statement).all())

        values = _normalize(changes)
        now = self.clock()
        for task in tasks:
            for key, value in values.items():
                if key == "completed":
                    task.mark_completed(value, now)
                else:
                    setattr(task, key, value)
            task.updated_at = now
            self.session.add(task)

        self.session.commit()
        for task in tasks:
            self.session.refresh(task)
        return tasks

    def _count(self, *clauses) -> int:
        statement = select(func.count()).select_from(Task).where(*clauses)
        return self.session.exec(statement).one()

    def _grouped(self, column, owner_id: str, keys: Sequence[str]) -> Dict[str, int]:
        statement = (
            select(column, func.count())
            .where(Task.user_id == owner_id)
            .group_by(column)
        )
        counts = {key: 0 for key in keys}
        for value, count in self.session.exec(statement).all():
            if value in counts:
                counts[value] = count
        return counts

    def stats_for(self, owner_id: str, now: datetime) -> StatsBundle:
        owned = Task.user_id == owner_id
        open_task = Task.completed == False  # noqa: E712

        return StatsBundle(
            total=self._count(owned),
            completed=self._count(owned, Task.completed == True),  # noqa: E712
            archived=self._count(owned, Task.is_archived == True),  # noqa: E712
            overdue=self._count(owned, open_task, Task.due_date < now),
            upcoming=self._count(
                owned, open_task, Task.due_date >= now, Task.due_date <= now + UPCOMING_WINDOW
            ),
            by_category=self._grouped(Task.category, owner_id, [c.value for c in TaskCategory]),
            by_priority=self._grouped(Task.priority, owner_id, [p.value for p in TaskPriority]),
        )

    def overdue_for(self, owner_id: str, now: datetime) -> List[Task]:
        statement = (
            select(Task)
            .where(Task.user_id == owner_id)
            .where(Task.completed == False)  # noqa: E712
            .where(Task.is_archived == False)  # noqa: E712
            .where(Task.due_date < now)
            .order_by(Task.due_date.asc(), Task.id.asc())
        )
        return list(self.session.exec(statement).all())

    def completed_in_period(self, owner_id: str, start: datetime, end: datetime) -> List[Task]:
        statement = (
            select(Task)
            .where(Task.user_id == owner_id)
            .where(Task.completed == True)  # noqa: E712
            .where(Task.completed_at >= start)
            .where(Task.completed_at <= end)
            .order_by(Task.completed_at.asc(), Task.id.asc())
        )
        return list(self.session.exec(statement).all())

    def created_in_period(self, owner_id: str, start: datetime, end: datetime) -> List[Task]:
        statement = (
            select(Task)
            .where(Task.user_id == owner_id)
            .where(Task.created_at >= start)
            .where(Task.created_at <= end)
            .order_by(Task.created_at.asc(), Task.id.asc())
        )
        return list(self.session.exec(statement).all())

    def find_due_between(self, start: datetime, end: datetime) -> List[Task]:
        statement = (
            select(Task)
            .where(Task.completed == False)  # noqa: E712
            .where(Task.due_date > start)
            .where(Task.due_date <= end)
            .order_by(Task.due_date.asc(), Task.id.asc())
        )
        return list(self.session.exec(statement).all())
