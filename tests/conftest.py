# tests/conftest.py

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from taskmanager.config import Settings
from taskmanager.db.config import build_engine
from taskmanager.db.init import init_db
from taskmanager.main import create_app
from taskmanager.repositories import SqlTaskRepository, SqlUserRepository
from taskmanager.services import AnalyticsService, AuthService, ReminderService, TaskService

from .fakes import FakeCache, FixedClock

# A Wednesday, noon UTC: far enough from midnight that "today" is unambiguous
NOW = datetime(2026, 3, 11, 12, 0, 0)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        jwt_secret="test-secret",
        auth_token_ttl=3600,
        bcrypt_salt_rounds=4,
        environment="test",
        log_level="DEBUG",
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def cache(clock: FixedClock) -> FakeCache:
    return FakeCache(clock)


@pytest.fixture()
def engine(settings: Settings):
    engine = build_engine(settings.database_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def user_repo(session: Session) -> SqlUserRepository:
    return SqlUserRepository(session)


@pytest.fixture()
def task_repo(session: Session, clock: FixedClock) -> SqlTaskRepository:
    return SqlTaskRepository(session, clock)


@pytest.fixture()
def auth_service(user_repo, cache, settings) -> AuthService:
    return AuthService(user_repo, cache, settings)


@pytest.fixture()
def task_service(task_repo, user_repo, clock) -> TaskService:
    return TaskService(task_repo, user_repo, clock=clock)


@pytest.fixture()
def analytics_service(task_repo, clock) -> AnalyticsService:
    return AnalyticsService(task_repo, clock=clock)


@pytest.fixture()
def reminder_service(task_repo, clock) -> ReminderService:
    return ReminderService(task_repo, clock=clock, window_hours=24)


@pytest.fixture()
def alice(user_repo):
    return user_repo.create("alice@acme.io", "not-a-real-hash")


@pytest.fixture()
def bob(user_repo):
    return user_repo.create("bob@acme.io", "not-a-real-hash")


@pytest.fixture()
def make_task(task_repo):
    """Create a task with explicit fields, timestamps included."""

    def _make(owner, title="Task", **fields):
        return task_repo.create(owner.id, {"title": title, **fields})

    return _make


@pytest.fixture()
def client(settings, cache, engine, clock):
    app = create_app(settings=settings, cache=cache, engine=engine, clock=clock)
    with TestClient(app) as client:
        yield client
