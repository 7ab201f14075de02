"""Runtime configuration for the task manager backend."""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from taskmanager.errors import ConfigurationError

# Load environment variables from a local .env when present
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, built once at startup and passed down explicitly."""

    database_url: str = "sqlite:///./taskmanager.db"
    redis_url: str = "redis://localhost:6379/0"
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    auth_token_ttl: int = 3600  # seconds; signed expiry and cache TTL
    bcrypt_salt_rounds: int = 10
    environment: str = "development"
    frontend_url: str = "http://localhost:3000"
    log_level: str = "INFO"
    default_page_size: int = 20
    max_page_size: int = 100
    reminder_window_hours: int = 24
    reminder_interval_seconds: int = 300

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        return cls(
            database_url=os.environ.get("DATABASE_URL", cls.database_url),
            redis_url=os.environ.get("REDIS_URL", cls.redis_url),
            jwt_secret=os.environ.get("JWT_SECRET", ""),
            jwt_algorithm=os.environ.get("JWT_ALGORITHM", cls.jwt_algorithm),
            auth_token_ttl=_env_int("AUTH_TOKEN_TTL", cls.auth_token_ttl),
            bcrypt_salt_rounds=_env_int("BCRYPT_SALT_ROUNDS", cls.bcrypt_salt_rounds),
            environment=os.environ.get("ENVIRONMENT", cls.environment),
            frontend_url=os.environ.get("FRONTEND_URL", cls.frontend_url),
            log_level=os.environ.get("LOG_LEVEL", cls.log_level),
            default_page_size=_env_int("DEFAULT_PAGE_SIZE", cls.default_page_size),
            max_page_size=_env_int("MAX_PAGE_SIZE", cls.max_page_size),
            reminder_window_hours=_env_int("REMINDER_WINDOW_HOURS", cls.reminder_window_hours),
            reminder_interval_seconds=_env_int("REMINDER_INTERVAL_SECONDS", cls.reminder_interval_seconds),
        )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def validate(self) -> None:
        """Fail fast on settings the service cannot run without."""
        if not self.jwt_secret:
            raise ConfigurationError("Required environment variable JWT_SECRET is missing")
        if self.auth_token_ttl <= 0:
            raise ConfigurationError("AUTH_TOKEN_TTL must be a positive number of seconds")
        if not 1 <= self.default_page_size <= self.max_page_size:
            raise ConfigurationError("DEFAULT_PAGE_SIZE must be between 1 and MAX_PAGE_SIZE")
