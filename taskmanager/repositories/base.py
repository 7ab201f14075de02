"""
Repository contracts

The services depend only on these interfaces. Every task operation except
``find_by_id`` and ``find_due_between`` is scoped to an owner id.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from taskmanager.models.task import Task
from taskmanager.models.user import User
from taskmanager.schemas.task import TaskFilter


@dataclass
class StatsBundle:
    """Raw counts over all of one owner's tasks."""
    total: int = 0
    completed: int = 0
    overdue: int = 0
    archived: int = 0
    upcoming: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)
    by_priority: Dict[str, int] = field(default_factory=dict)

    @property
    def pending(self) -> int:
        return self.total - self.completed


class TaskRepository(ABC):

    @abstractmethod
    def find_by_id(self, task_id: int) -> Optional[Task]:
        """Fetch a task regardless of owner; callers enforce ownership."""

    @abstractmethod
    def find_by_owner(self, owner_id: str, filters: TaskFilter) -> Tuple[List[Task], int]:
        """Return one page of matching tasks and the unpaginated match count."""

    @abstractmethod
    def create(self, owner_id: str, data: Dict[str, Any]) -> Task:
        ...

    @abstractmethod
    def save(self, task: Task) -> Task:
        ...

    @abstractmethod
    def delete(self, task_id: int, owner_id: str) -> bool:
        """Return True only if a row owned by ``owner_id`` was removed."""

    @abstractmethod
    def bulk_update(self, task_ids: Sequence[int], owner_id: str, changes: Dict[str, Any]) -> List[Task]:
        """Apply ``changes`` to owned tasks in ``task_ids``; others are skipped."""

    @abstractmethod
    def stats_for(self, owner_id: str, now: datetime) -> StatsBundle:
        ...

    @abstractmethod
    def overdue_for(self, owner_id: str, now: datetime) -> List[Task]:
        ...

    @abstractmethod
    def completed_in_period(self, owner_id: str, start: datetime, end: datetime) -> List[Task]:
        ...

    @abstractmethod
    def created_in_period(self, owner_id: str, start: datetime, end: datetime) -> List[Task]:
        ...

    @abstractmethod
    def find_due_between(self, start: datetime, end: datetime) -> List[Task]:
        """Open tasks of any owner with ``start < due_date <= end``."""


class UserRepository(ABC):

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def create(self, email: str, password_hash: str) -> User:
        ...

    @abstractmethod
    def save(self, user: User) -> User:
        ...
