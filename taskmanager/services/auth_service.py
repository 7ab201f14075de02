"""Credential and session-token management.

A login issues a signed JWT and records it in the cache under the user's id
with the same TTL as the token's ``exp``. A token is accepted only if its
signature and expiry verify *and* it is the exact string cached for its
user. Logging out, or logging in again, therefore revokes earlier tokens
even though they would still verify cryptographically.
"""
import base64
import hashlib
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from taskmanager.config import Settings
from taskmanager.errors import ConfigurationError, ConflictError, UnauthorizedError
from taskmanager.repositories.base import UserRepository
from taskmanager.services.cache_service import CacheBackend
from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_TOKEN = "Invalid or expired token"


def _prehash(password: str) -> bytes:
    """SHA-256 then base64, so any password length fits bcrypt's 72-byte input."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str, rounds: int) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_prehash(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Registers users, issues and validates single-session tokens."""

    def __init__(self, users: UserRepository, cache: CacheBackend, settings: Settings):
        self.users = users
        self.cache = cache
        self.settings = settings

    def register(self, email: str, password: str) -> str:
        """Create an account and return the new user's id."""
        email = normalize_email(email)
        logger.info("Attempting to register user", email=email)

        if self.users.find_by_email(email):
            logger.warning("Registration failed - user already exists", email=email)
            raise ConflictError("User already exists")

        user = self.users.create(email, hash_password(password, self.settings.bcrypt_salt_rounds))
        logger.info("User registered successfully", user_id=user.id)
        return user.id

    def login(self, email: str, password: str) -> str:
        """Verify credentials and return a fresh token, replacing any previous one."""
        email = normalize_email(email)
        logger.info("Attempting to login user", email=email)

        user = self.users.find_by_email(email)
        if not user:
            logger.warning("Login failed - user not found", email=email)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not verify_password(password, user.password_hash):
            logger.warning("Login failed - invalid password", email=email)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        token = self._issue_token(user.id)

        # Overwrites any earlier token for this user
        self.cache.set(user.id, token, self.settings.auth_token_ttl)

        logger.info("User logged in successfully", user_id=user.id)
        return token

    def logout(self, token: str) -> None:
        user_id = self.validate_token(token)
        if not user_id:
            logger.warning("Logout failed - invalid token")
            raise UnauthorizedError(INVALID_TOKEN)

        self.cache.delete(user_id)
        logger.info("User logged out successfully", user_id=user_id)

    def validate_token(self, token: str) -> Optional[str]:
        """Return the token's user id, or None when it must not be honoured."""
        if not token:
            return None

        try:
            payload = jwt.decode(
                token,
                self._secret(),
                algorithms=[self.settings.jwt_algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.PyJWTError as e:
            logger.debug("Token validation failed", reason=type(e).__name__)
            return None

        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            logger.debug("Token validation failed", reason="missing subject")
            return None

        cached = self.cache.get(user_id)
        if cached is None or cached != token:
            logger.debug("Token validation failed", reason="not the active session", user_id=user_id)
            return None

        return user_id

    def authenticate(self, token: str) -> str:
        """Like ``validate_token`` but raises for the request pipeline."""
        user_id = self.validate_token(token)
        if not user_id:
            raise UnauthorizedError(INVALID_TOKEN)
        return user_id

    def _secret(self) -> str:
        if not self.settings.jwt_secret:
            raise ConfigurationError("JWT secret is not configured")
        return self.settings.jwt_secret

    def _issue_token(self, user_id: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "iat": now,
            "exp": now + timedelta(seconds=self.settings.auth_token_ttl),
            # Two logins within the same second must still yield distinct tokens
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secret(), algorithm=self.settings.jwt_algorithm)
