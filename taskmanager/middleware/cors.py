"""CORS configuration for browser clients."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskmanager.config import Settings
from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)

# Base allowed origins for development
DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def allowed_origins(settings: Settings) -> list:
    origins = list(DEV_ORIGINS) if settings.is_development else []
    if settings.frontend_url and settings.frontend_url not in origins:
        origins.append(settings.frontend_url)
    return origins


def add_cors_middleware(app: FastAPI, settings: Settings) -> None:
    """Add CORS middleware to the FastAPI application."""
    origins = allowed_origins(settings)
    logger.info("Configuring CORS", environment=settings.environment, origins=origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
