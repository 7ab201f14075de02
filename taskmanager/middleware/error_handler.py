"""Render application errors as JSON responses."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from taskmanager.errors import AppError, ErrorKind
from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)


def _is_development(request: Request) -> bool:
    return request.app.state.settings.is_development


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        body = {"detail": exc.message, "kind": exc.kind}
        if _is_development(request) and exc.details:
            body["details"] = exc.details

        if exc.kind == ErrorKind.INTERNAL:
            logger.error("Internal error", path=request.url.path, error=exc.message)

        headers = {"WWW-Authenticate": "Bearer"} if exc.kind == ErrorKind.UNAUTHORIZED else None
        return JSONResponse(status_code=exc.status_code, content=body, headers=headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", path=request.url.path)

        body = {"detail": "Internal server error", "kind": ErrorKind.INTERNAL}
        if _is_development(request):
            body["detail"] = str(exc) or body["detail"]
            body["error_type"] = type(exc).__name__
        return JSONResponse(status_code=500, content=body)
