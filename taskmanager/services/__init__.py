"""Domain services; each is constructed with its repositories injected."""
from taskmanager.services.analytics_service import AnalyticsService
from taskmanager.services.auth_service import AuthService
from taskmanager.services.cache_service import CacheBackend, RedisCache
from taskmanager.services.reminder_service import ReminderService
from taskmanager.services.task_service import TaskService

__all__ = [
    "AnalyticsService",
    "AuthService",
    "CacheBackend",
    "RedisCache",
    "ReminderService",
    "TaskService",
]
