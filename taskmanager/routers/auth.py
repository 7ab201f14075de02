"""Authentication router: register, login, logout."""
from fastapi import APIRouter, Depends, Request, status

from taskmanager.config import Settings
from taskmanager.dependencies import get_auth_service, get_settings
from taskmanager.middleware.auth import extract_bearer_token
from taskmanager.schemas.auth import LoginRequest, MessageResponse, RegisterRequest, TokenResponse
from taskmanager.services.auth_service import AuthService

router = APIRouter(tags=["Authentication"])  # No prefix since main.py adds /auth


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """Register a new user."""
    auth.register(request.email, request.password)
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=TokenResponse)
def login(
    request: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Exchange credentials for a session token."""
    token = auth.login(request.email, request.password)
    return TokenResponse(token=token, expires_in=settings.auth_token_ttl)


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request, auth: AuthService = Depends(get_auth_service)):
    """Revoke the caller's session token."""
    token = extract_bearer_token(request)
    if token:
        auth.logout(token)
    return MessageResponse(message="Logged out successfully")
