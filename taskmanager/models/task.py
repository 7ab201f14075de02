"""Task model for SQLModel."""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, String, ForeignKey, JSON
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from taskmanager.utils.datetime import utcnow

if TYPE_CHECKING:
    from taskmanager.models.user import User


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskCategory(str, Enum):
    WORK = "work"
    PERSONAL = "personal"
    SHOPPING = "shopping"
    HEALTH = "health"
    EDUCATION = "education"
    OTHER = "other"


# Severity rank used when sorting by priority
PRIORITY_RANK = {
    TaskPriority.HIGH.value: 3,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.LOW.value: 1,
}


class Task(SQLModel, table=True):
    """Task entity owned by exactly one user."""

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(
        sa_column=Column(String, ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    )
    title: str = Field(max_length=200, min_length=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    completed: bool = Field(default=False, index=True)
    priority: str = Field(default=TaskPriority.MEDIUM.value, max_length=20)  # high, medium, low
    category: str = Field(default=TaskCategory.OTHER.value, max_length=20)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # All timestamps are naive UTC
    due_date: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, index=True, nullable=True))
    is_archived: bool = Field(default=False)
    completed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, index=True, nullable=True)
    )  # set while completed
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))

    # Relationships
    user: Optional["User"] = Relationship(back_populates="tasks")

    def mark_completed(self, completed: bool, now: datetime) -> None:
        """Flip completion, keeping ``completed_at`` in step."""
        if completed and (not self.completed or self.completed_at is None):
            self.completed_at = now
        elif not completed:
            self.completed_at = None
        self.completed = completed
