"""Persistence contracts and their SQL implementations."""
from taskmanager.repositories.base import StatsBundle, TaskRepository, UserRepository
from taskmanager.repositories.task_repository import SqlTaskRepository
from taskmanager.repositories.user_repository import SqlUserRepository

__all__ = [
    "StatsBundle",
    "TaskRepository",
    "UserRepository",
    "SqlTaskRepository",
    "SqlUserRepository",
]
