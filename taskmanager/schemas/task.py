"""Task schemas: request bodies, the list filter and response DTOs."""
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskmanager.models.task import TaskCategory, TaskPriority


class TaskStatusFilter(str, Enum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"


class TaskSortField(str, Enum):
    TITLE = "title"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    DUE_DATE = "due_date"
    PRIORITY = "priority"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class TaskFilter(BaseModel):
    """Immutable query parameters for one task listing.

    Absent fields impose no constraint. ``limit`` is left unset here; the
    service fills in the default page size before querying.
    """
    model_config = ConfigDict(frozen=True)

    status: TaskStatusFilter = TaskStatusFilter.ALL
    category: Optional[TaskCategory] = None
    priority: Optional[TaskPriority] = None
    tags: Optional[Tuple[str, ...]] = None
    search: Optional[str] = None
    is_archived: Optional[bool] = None
    sort_by: TaskSortField = TaskSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    limit: Optional[int] = Field(default=None, ge=1)
    offset: Optional[int] = Field(default=None, ge=0)

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, value):
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        cleaned = _clean_tags(list(value))
        return tuple(cleaned) if cleaned else None


class TaskCreate(BaseModel):
    """Schema for creating a task."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    priority: TaskPriority = TaskPriority.MEDIUM
    category: TaskCategory = TaskCategory.OTHER
    tags: List[str] = Field(default_factory=list, max_length=10)
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value.strip()

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value):
        return _clean_tags(value)


class TaskUpdate(BaseModel):
    """Partial update; only fields present in the payload are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    completed: Optional[bool] = None
    priority: Optional[TaskPriority] = None
    category: Optional[TaskCategory] = None
    tags: Optional[List[str]] = Field(None, max_length=10)
    is_archived: Optional[bool] = None
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: Optional[str]) -> Optional[str]:
        # None is left for the service, which rejects clearing required fields
        if value is None:
            return None
        if not value.strip():
            raise ValueError("title must not be blank")
        return value.strip()

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value):
        return _clean_tags(value)

    def changes(self) -> Dict[str, object]:
        """Fields explicitly set by the caller, enums reduced to values."""
        data = self.model_dump(exclude_unset=True, mode="python")
        for key in ("priority", "category"):
            if isinstance(data.get(key), Enum):
                data[key] = data[key].value
        return data


class BulkUpdateRequest(BaseModel):
    task_ids: List[int] = Field(..., max_length=500)
    updates: TaskUpdate


class TaskResponse(BaseModel):
    """Schema for task API responses."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    completed: bool
    priority: TaskPriority
    category: TaskCategory
    tags: List[str] = []
    is_archived: bool
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_next: bool
    has_prev: bool


class TaskStats(BaseModel):
    """Statistics over every task the user owns, independent of any filter."""
    total: int
    completed: int
    pending: int
    overdue: int
    archived: int
    completion_rate: int
    category_stats: Dict[str, int]
    priority_stats: Dict[str, int]
    upcoming_tasks: int  # due in the next 7 days, not completed


class PaginatedTasks(BaseModel):
    tasks: List[TaskResponse]
    pagination: Pagination
    stats: TaskStats


class DailyCompletion(BaseModel):
    date: date
    count: int


class TaskAnalytics(BaseModel):
    completed_tasks_over_time: List[DailyCompletion]
    tasks_by_category: Dict[str, int]
    tasks_by_priority: Dict[str, int]
    average_completion_time: float  # hours
    productivity_trend: float  # percent change from the previous window
    total_tasks_in_period: int
    completed_tasks_in_period: int


class CompletionTimes(BaseModel):
    low: float = 0.0
    medium: float = 0.0
    high: float = 0.0


class ProductivityInsights(BaseModel):
    most_productive_category: str
    least_productive_category: str
    average_tasks_per_day: float
    best_completion_day: str
    recommended_focus: str
    streak_days: int
    time_to_complete: CompletionTimes
