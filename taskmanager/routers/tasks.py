"""Task router: listing, statistics, analytics and CRUD for the caller's tasks."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from taskmanager.dependencies import get_analytics_service, get_task_service
from taskmanager.middleware.auth import CurrentUser, get_current_user
from taskmanager.models.task import TaskCategory, TaskPriority
from taskmanager.schemas.task import (
    BulkUpdateRequest,
    PaginatedTasks,
    ProductivityInsights,
    SortOrder,
    TaskAnalytics,
    TaskCreate,
    TaskFilter,
    TaskResponse,
    TaskSortField,
    TaskStats,
    TaskStatusFilter,
    TaskUpdate,
)
from taskmanager.services.analytics_service import MAX_WINDOW_DAYS, AnalyticsService
from taskmanager.services.task_service import TaskService

router = APIRouter(tags=["Tasks"])  # No prefix since main.py adds /api/tasks


def task_filter(
    status: TaskStatusFilter = Query(TaskStatusFilter.ALL, description="Filter by status: all, pending, completed"),
    category: Optional[TaskCategory] = Query(None, description="Filter by category"),
    priority: Optional[TaskPriority] = Query(None, description="Filter by priority: high, medium, low"),
    tags: Optional[str] = Query(None, description="Comma-separated tags; all must be present"),
    search: Optional[str] = Query(None, description="Case-insensitive search in title/description"),
    is_archived: Optional[bool] = Query(None, description="Restrict to archived or unarchived tasks"),
    sort_by: TaskSortField = Query(TaskSortField.CREATED_AT, description="Sort field"),
    sort_order: SortOrder = Query(SortOrder.DESC, description="Sort direction: asc, desc"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Page size (default 20)"),
    offset: Optional[int] = Query(None, ge=0, description="Rows to skip"),
) -> TaskFilter:
    """Dependency turning query parameters into a TaskFilter."""
    return TaskFilter(
        status=status,
        category=category,
        priority=priority,
        tags=tags,
        search=search,
        is_archived=is_archived,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )


@router.get("", response_model=PaginatedTasks)
def list_tasks(
    filters: TaskFilter = Depends(task_filter),
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """List the caller's tasks with filtering, sorting and pagination."""
    return service.list_tasks(current_user.user_id, filters)


@router.get("/stats", response_model=TaskStats)
def get_stats(
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Statistics over all of the caller's tasks."""
    return service.get_stats(current_user.user_id)


@router.get("/overdue", response_model=List[TaskResponse])
def get_overdue(
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Open, unarchived tasks whose due date has passed."""
    tasks = service.get_overdue_tasks(current_user.user_id)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.get("/archived", response_model=PaginatedTasks)
def list_archived(
    filters: TaskFilter = Depends(task_filter),
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """List archived tasks; accepts the same filters as the main listing."""
    archived = filters.model_copy(update={"is_archived": True})
    return service.list_tasks(current_user.user_id, archived)


@router.get("/analytics", response_model=TaskAnalytics)
def get_analytics(
    days: int = Query(30, ge=1, le=MAX_WINDOW_DAYS, description="Window length in days"),
    current_user: CurrentUser = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Completion metrics over the last ``days`` days."""
    return service.get_analytics(current_user.user_id, days)


@router.get("/insights", response_model=ProductivityInsights)
def get_insights(
    current_user: CurrentUser = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Productivity insights over the last 30 days."""
    return service.get_productivity_insights(current_user.user_id)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Create a new task."""
    task = service.create_task(current_user.user_id, task_data)
    return TaskResponse.model_validate(task)


@router.put("", response_model=List[TaskResponse])
def bulk_update_tasks(
    request: BulkUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Apply one update to many tasks; ids the caller does not own are skipped."""
    tasks = service.bulk_update(current_user.user_id, request.task_ids, request.updates)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Get a specific task by ID."""
    return TaskResponse.model_validate(service.get_task(task_id, current_user.user_id))


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Update any subset of a task's fields."""
    task = service.update_task(task_id, current_user.user_id, task_data)
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}/complete", response_model=TaskResponse)
def toggle_complete(
    task_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Toggle task completion status."""
    task = service.toggle_complete(task_id, current_user.user_id)
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Delete a task."""
    service.delete_task(task_id, current_user.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
