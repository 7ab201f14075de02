"""Bearer-token authentication dependency for FastAPI."""
from typing import Optional

from fastapi import Depends, Request
from pydantic import BaseModel

from taskmanager.dependencies import get_auth_service
from taskmanager.errors import UnauthorizedError
from taskmanager.services.auth_service import AuthService


class CurrentUser(BaseModel):
    """User resolved from a validated session token."""
    user_id: str


def extract_bearer_token(request: Request) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer`` header, if any."""
    auth_header = request.headers.get("authorization")
    if not auth_header:
        return None

    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> CurrentUser:
    """
    Validate the bearer token and resolve the calling user.

    Raises:
        UnauthorizedError: If the header is missing, or the token is invalid,
            expired or no longer the user's active session
    """
    token = extract_bearer_token(request)
    if not token:
        raise UnauthorizedError("Missing or invalid Authorization header")

    return CurrentUser(user_id=auth.authenticate(token))
