"""FastAPI dependencies wiring services to the per-request session.

Long-lived collaborators (settings, engine, cache, clock) are created once in
``create_app`` and kept on ``app.state``; repositories and services are built
per request around a fresh session.
"""
from fastapi import Depends, Request
from sqlmodel import Session

from taskmanager.config import Settings
from taskmanager.db.config import get_session
from taskmanager.repositories import SqlTaskRepository, SqlUserRepository
from taskmanager.services import AnalyticsService, AuthService, CacheBackend, TaskService
from taskmanager.utils.datetime import Clock


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(request: Request) -> CacheBackend:
    return request.app.state.cache


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_auth_service(
    session: Session = Depends(get_session),
    cache: CacheBackend = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    """Dependency for getting AuthService instance."""
    return AuthService(SqlUserRepository(session), cache, settings)


def get_task_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> TaskService:
    """Dependency for getting TaskService instance."""
    return TaskService(
        SqlTaskRepository(session, clock),
        SqlUserRepository(session),
        clock=clock,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )


def get_analytics_service(
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> AnalyticsService:
    """Dependency for getting AnalyticsService instance."""
    return AnalyticsService(SqlTaskRepository(session, clock), clock=clock)
