"""Session storage interface and implementations.

Provides a unified interface for storing user sessions with a Redis backend
and an in-memory fallback.
"""

from __future__ import annotations

import fnmatch
import json
import time
from abc import ABC, abstractmethod
from typing import Any, TypeVar

import redis
from loguru import logger
from pydantic import BaseModel, ValidationError

from src.directory_bridge.runtime.config.config_data import RedisConfig

T = TypeVar("T", bound=BaseModel)


class SessionStorage(ABC):
    """Abstract interface for session storage backends."""

    @abstractmethod
    def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        """Store a session with TTL.

        Args:
            key: Session identifier
            value: Session data (Pydantic model)
            ttl_seconds: Time to live in seconds
        """

    @abstractmethod
    def get(self, key: str, model_class: type[T]) -> T | None:
        """Retrieve a session.

        Args:
            key: Session identifier
            model_class: Pydantic model class to deserialize to

        Returns:
            Session data or None if not found/expired
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a session."""

    @abstractmethod
    def list_keys(self, pattern: str) -> list[str]:
        """List keys matching a glob pattern (e.g. ``"user:*"``)."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if storage backend is available."""

    def list_sessions(self, pattern: str, model_class: type[T]) -> list[T]:
        """List valid, non-expired sessions matching a pattern."""
        sessions = []
        for key in self.list_keys(pattern):
            session = self.get(key, model_class)
            if session:
                sessions.append(session)
        return sessions


class InMemorySessionStorage(SessionStorage):
    """In-memory session storage with TTL support."""

    def __init__(self):
        self._data: dict[str, dict[str, Any]] = {}

    def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        """Store session in memory with expiration."""
        self._data[key] = {
            "data": json.loads(value.model_dump_json()),
            "expires_at": time.time() + ttl_seconds,
        }

    def get(self, key: str, model_class: type[T]) -> T | None:
        """Retrieve session from memory if not expired."""
        entry = self._data.get(key)
        if entry is None:
            return None

        if time.time() > entry["expires_at"]:
            del self._data[key]
            return None

        try:
            return model_class.model_validate(entry["data"])
        except ValidationError:
            logger.warning("Dropping unreadable session entry {}", key)
            del self._data[key]
            return None

    def delete(self, key: str) -> None:
        """Delete session from memory."""
        self._data.pop(key, None)

    def cleanup_expired(self) -> int:
        """Remove expired sessions from memory."""
        now = time.time()
        expired_keys = [key for key, entry in self._data.items() if now > entry["expires_at"]]
        for key in expired_keys:
            del self._data[key]
        return len(expired_keys)

    def list_keys(self, pattern: str) -> list[str]:
        """List unexpired keys matching a pattern using fnmatch."""
        self.cleanup_expired()
        return [key for key in self._data if fnmatch.fnmatch(key, pattern)]

    def is_available(self) -> bool:
        """In-memory storage is always available."""
        return True


class RedisSessionStorage(SessionStorage):
    """Redis-based session storage; Redis handles expiry."""

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client
        self._available = True

    def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        try:
            self._redis.setex(key, ttl_seconds, value.model_dump_json())
            self._available = True
        except redis.RedisError as e:
            self._available = False
            raise RuntimeError(f"Redis set failed: {e}") from e

    def get(self, key: str, model_class: type[T]) -> T | None:
        try:
            data = self._redis.get(key)
        except redis.RedisError as e:
            self._available = False
            raise RuntimeError(f"Redis get failed: {e}") from e

        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")

        try:
            return model_class.model_validate_json(data)
        except ValidationError:
            logger.warning("Dropping unreadable session entry {}", key)
            self._redis.delete(key)
            return None

    def delete(self, key: str) -> None:
        try:
            self._redis.delete(key)
            self._available = True
        except redis.RedisError as e:
            self._available = False
            raise RuntimeError(f"Redis delete failed: {e}") from e

    def list_keys(self, pattern: str) -> list[str]:
        try:
            keys = [
                key.decode("utf-8") if isinstance(key, bytes) else key
                for key in self._redis.scan_iter(match=pattern, count=100)
            ]
            self._available = True
            return keys
        except redis.RedisError as e:
            self._available = False
            raise RuntimeError(f"Redis scan failed: {e}") from e

    def is_available(self) -> bool:
        return self._available

    def ping(self) -> bool:
        """Test Redis connection health."""
        try:
            self._redis.ping()
            self._available = True
        except redis.RedisError:
            self._available = False
        return self._available


def get_session_storage(config: RedisConfig) -> SessionStorage:
    """Use Redis when it is configured and answering, else in-memory storage."""
    if not config.enabled or not config.url:
        logger.info("Session storage: in-memory (Redis not configured)")
        return InMemorySessionStorage()

    client = redis.Redis.from_url(
        config.connection_string,
        decode_responses=config.decode_responses,
        socket_connect_timeout=2,
        socket_timeout=2,
    )
    storage = RedisSessionStorage(client)
    if storage.ping():
        logger.info("Session storage: Redis connected")
        return storage

    logger.warning("Redis unavailable, using in-memory session storage")
    return InMemorySessionStorage()
