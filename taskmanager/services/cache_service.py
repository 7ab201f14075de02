"""Key-value cache used for session token membership."""
from abc import ABC, abstractmethod
from typing import Optional

import redis

from taskmanager.errors import CacheError
from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)


class CacheBackend(ABC):
    """Minimal string cache contract."""

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        ...

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


class RedisCache(CacheBackend):
    """Cache backed by a Redis server."""

    def __init__(self, client: "redis.Redis", prefix: str = "auth:token:"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        logger.info("Connecting to Redis")
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        try:
            if ttl_seconds:
                self.client.set(self._key(key), value, ex=ttl_seconds)
            else:
                self.client.set(self._key(key), value)
        except redis.RedisError as e:
            logger.error("Redis SET failed", error=str(e))
            raise CacheError("Session store unavailable") from e

    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(self._key(key))
        except redis.RedisError as e:
            logger.error("Redis GET failed", error=str(e))
            raise CacheError("Session store unavailable") from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except redis.RedisError as e:
            logger.error("Redis DEL failed", error=str(e))
            raise CacheError("Session store unavailable") from e
