"""SQLModel table definitions."""
from taskmanager.models.task import Task, TaskCategory, TaskPriority
from taskmanager.models.user import User

__all__ = ["Task", "TaskCategory", "TaskPriority", "User"]
