"""Database engine and session wiring."""
from typing import Generator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the SQLModel engine for the configured database."""
    if not database_url.startswith("sqlite"):
        logger.info("Using PostgreSQL-compatible database")
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    logger.info("Using SQLite database", url=database_url)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every session sees an empty database
        kwargs["poolclass"] = StaticPool
    engine = create_engine(database_url, echo=echo, **kwargs)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        # Owner deletion cascades to tasks only with foreign keys on
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        # Unicode-aware case folding for search; built-in lower() is ASCII only
        dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)

    return engine


def get_session(request: Request) -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    with Session(request.app.state.engine) as session:
        yield session
