"""
Storage Module - key-value backends for cart persistence

Provides:
- MemoryKeyValueStore for tests and throwaway sessions
- FileKeyValueStore, a JSON document on disk (one per user profile)
- RedisKeyValueStore backed by Upstash Redis
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

from upstash_redis import Redis

from storefront.config import CartConfig
from storefront.errors import ERROR_REDIS_NOT_CONFIGURED, ERROR_UNKNOWN_BACKEND

# Upstash Redis - standard env var names per docs
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

_sync_redis_client: Optional[Redis] = None


def get_redis_sync() -> Redis:
    """
    Get sync Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _sync_redis_client

    if _sync_redis_client is None:
        if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
            raise ValueError(ERROR_REDIS_NOT_CONFIGURED)
        _sync_redis_client = Redis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)

    return _sync_redis_client


class KeyValueStore(Protocol):
    """String-to-string store with localStorage semantics."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryKeyValueStore:
    """Process-local store. Lost on exit."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileKeyValueStore:
    """
    Durable store kept as a single JSON object on disk.

    Every write rewrites the whole document through a temp file and
    os.replace, so a crash mid-write leaves the previous version intact.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except (json.JSONDecodeError, ValueError):
            # Unreadable document: start over rather than refuse every write
            data = {}
        data[key] = value
        self._write_all(data)


class RedisKeyValueStore:
    """Upstash Redis store with optional expiry."""

    def __init__(self, client: Optional[Redis] = None, ttl_seconds: Optional[int] = None):
        self._redis = client  # Lazy initialization
        self.ttl_seconds = ttl_seconds

    @property
    def redis(self) -> Redis:
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis_sync()
        return self._redis

    def get(self, key: str) -> Optional[str]:
        value = self.redis.get(key)
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    def set(self, key: str, value: str) -> None:
        if self.ttl_seconds:
            self.redis.set(key, value, ex=self.ttl_seconds)
        else:
            self.redis.set(key, value)


def get_key_value_store(config: CartConfig) -> KeyValueStore:
    """Build the backend named by config.storage_backend."""
    backend = config.storage_backend
    if backend == "memory":
        return MemoryKeyValueStore()
    if backend == "file":
        return FileKeyValueStore(config.storage_path)
    if backend == "redis":
        return RedisKeyValueStore(ttl_seconds=config.ttl_seconds)
    raise ValueError(f"{ERROR_UNKNOWN_BACKEND}: {backend}")
