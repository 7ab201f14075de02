"""Main FastAPI application for the task manager backend."""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.engine import Engine

from taskmanager import __version__
from taskmanager.config import Settings
from taskmanager.db.config import build_engine
from taskmanager.db.init import init_db
from taskmanager.middleware.cors import add_cors_middleware
from taskmanager.middleware.error_handler import register_exception_handlers
from taskmanager.routers import auth_router, tasks_router
from taskmanager.services.cache_service import CacheBackend, RedisCache
from taskmanager.utils.datetime import Clock, utcnow
from taskmanager.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    cache: Optional[CacheBackend] = None,
    engine: Optional[Engine] = None,
    clock: Clock = utcnow,
) -> FastAPI:
    """Build the application with its long-lived collaborators."""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Validate configuration and make sure tables exist."""
        settings.validate()
        init_db(app.state.engine)
        logger.info("Application startup complete", environment=settings.environment)
        yield
        logger.info("Application shutdown")

    app = FastAPI(
        lifespan=lifespan,
        title="Task Manager API",
        description="Task management REST backend with filtering, statistics and analytics",
        version=__version__,
    )
    app.state.settings = settings
    app.state.engine = engine if engine is not None else build_engine(settings.database_url)
    app.state.cache = cache if cache is not None else RedisCache.from_url(settings.redis_url)
    app.state.clock = clock

    add_cors_middleware(app, settings)
    register_exception_handlers(app)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    app.include_router(auth_router, prefix="/auth")  # /auth/register, /auth/login, /auth/logout
    app.include_router(tasks_router, prefix="/api/tasks")

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskmanager.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
