"""Look-aside cache backed by Redis.

Every operation degrades to a cache miss when Redis is not configured or
not reachable; callers never see a cache error.
"""

import json
import logging
from typing import Any
from urllib.parse import urlencode

import redis
from fastapi import Request

logger = logging.getLogger("todo_api")

DEFAULT_TTL_SECONDS = 300


class CacheService:
    """JSON key/value cache over a redis-py client."""

    def __init__(self, url: str | None = None, password: str | None = None, db: int = 0) -> None:
        self.url = url
        self.password = password
        self.db = db
        self.client: redis.Redis | None = None
        self.is_connected = False

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def connect(self) -> bool:
        """Connect and PING. Returns False (and stays disabled) on failure."""
        if not self.url:
            logger.info("Redis URL not provided, caching disabled")
            return False
        try:
            self.client = redis.Redis.from_url(
                self.url,
                password=self.password,
                db=self.db,
                socket_connect_timeout=2,
                socket_timeout=2,
                decode_responses=True,
            )
            self.is_connected = bool(self.client.ping())
            logger.info("Redis connected at %s (db %d)", self.url, self.db)
        except redis.RedisError as e:
            logger.warning("Failed to connect to Redis: %s", e)
            self.is_connected = False
        return self.is_connected

    def ping(self) -> bool:
        """Return True if Redis answers a PING right now."""
        if self.client is None:
            return False
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def _available(self) -> bool:
        return self.is_connected and self.client is not None

    def get(self, key: str) -> Any | None:
        if not self._available():
            return None
        try:
            raw = self.client.get(key)
            return json.loads(raw) if raw else None
        except (redis.RedisError, ValueError) as e:
            logger.warning("Cache get error for %s: %s", key, e)
            return None

    def set(self, key: str, value: Any, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> bool:
        if not self._available():
            return False
        try:
            self.client.setex(key, ttl_seconds, json.dumps(value))
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning("Cache set error for %s: %s", key, e)
            return False

    def delete(self, key: str) -> bool:
        if not self._available():
            return False
        try:
            self.client.delete(key)
            return True
        except redis.RedisError as e:
            logger.warning("Cache delete error for %s: %s", key, e)
            return False

    def delete_pattern(self, pattern: str) -> bool:
        """Delete every key matching a glob pattern (SCAN, not KEYS)."""
        if not self._available():
            return False
        try:
            keys = list(self.client.scan_iter(match=pattern, count=100))
            if keys:
                self.client.delete(*keys)
            return True
        except redis.RedisError as e:
            logger.warning("Cache delete pattern error for %s: %s", pattern, e)
            return False

    def exists(self, key: str) -> bool:
        if not self._available():
            return False
        try:
            return self.client.exists(key) == 1
        except redis.RedisError as e:
            logger.warning("Cache exists error for %s: %s", key, e)
            return False

    def disconnect(self) -> None:
        if self.client is not None:
            try:
                self.client.close()
            except redis.RedisError as e:
                logger.warning("Error closing Redis connection: %s", e)
        self.client = None
        self.is_connected = False


def user_todos_key(user_id: int, params: dict[str, Any] | None = None) -> str:
    """Key for one list query of a user's todos; params are sorted for stability."""
    query = urlencode(sorted((k, v) for k, v in (params or {}).items() if v is not None))
    return f"todos:user:{user_id}:{query}"


def user_stats_key(user_id: int) -> str:
    return f"stats:user:{user_id}"


def invalidate_user_cache(cache: CacheService, user_id: int) -> None:
    """Drop every cached list and the stats entry of one user."""
    cache.delete_pattern(f"todos:user:{user_id}:*")
    cache.delete(user_stats_key(user_id))


def get_cache(request: Request) -> CacheService:
    """FastAPI dependency returning the application's cache client."""
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        cache = CacheService()
        request.app.state.cache = cache
    return cache
