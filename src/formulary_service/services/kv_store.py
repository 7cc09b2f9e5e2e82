# ABOUTME: Provides the key-value store abstraction consumed by the formulary engine.
# ABOUTME: Supports both an in-memory stub (for development and tests) and Redis (for production).
"""Key-value store client abstractions."""

from __future__ import annotations

from fnmatch import fnmatchcase
import time
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Set, Union
import logging

import redis

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class KeyValueStoreError(ConnectionError):
    """Raised when the underlying store cannot be reached or rejects a call."""


class KeyValueStore(Protocol):
    """Protocol defining the store operations the formulary engine relies on."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        ...

    def delete(self, *keys: str) -> int:
        ...

    def exists(self, key: str) -> bool:
        ...

    def sadd(self, key: str, *members: str) -> int:
        ...

    def srem(self, key: str, *members: str) -> int:
        ...

    def smembers(self, key: str) -> Set[str]:
        ...

    def sinter(self, keys: List[str]) -> Set[str]:
        ...

    def scard(self, key: str) -> int:
        ...

    def scan_keys(self, pattern: str) -> List[str]:
        ...

    def ping(self) -> bool:
        ...


class InMemoryKeyValueStore:
    """In-memory stub implementation for development and testing.

    Mirrors the Redis behaviours the engine depends on: strings and sets share
    one keyspace, a set whose last member is removed disappears, and keys set
    with a TTL vanish once the injected clock passes their deadline.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or time.time
        self._data: Dict[str, Union[str, Set[str]]] = {}
        self._expires_at: Dict[str, float] = {}

    def get(self, key: str) -> Optional[str]:
        value = self._live(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise KeyValueStoreError(f"WRONGTYPE key {key} does not hold a string")
        return value

    def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        self._data[key] = value
        if ttl_seconds is not None:
            self._expires_at[key] = self._clock() + ttl_seconds
        else:
            self._expires_at.pop(key, None)

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                removed += 1
            self._data.pop(key, None)
            self._expires_at.pop(key, None)
        return removed

    def exists(self, key: str) -> bool:
        return self._live(key) is not None

    def sadd(self, key: str, *members: str) -> int:
        current = self._set_at(key)
        if current is None:
            current = set()
            self._data[key] = current
        before = len(current)
        current.update(members)
        return len(current) - before

    def srem(self, key: str, *members: str) -> int:
        current = self._set_at(key)
        if current is None:
            return 0
        before = len(current)
        current.difference_update(members)
        if not current:
            self.delete(key)
        return before - len(current)

    def smembers(self, key: str) -> Set[str]:
        return set(self._set_at(key) or ())

    def sinter(self, keys: List[str]) -> Set[str]:
        if not keys:
            return set()
        sets = sorted((self.smembers(key) for key in keys), key=len)
        result = sets[0]
        for other in sets[1:]:
            if not result:
                break
            result = result & other
        return result

    def scard(self, key: str) -> int:
        return len(self._set_at(key) or ())

    def scan_keys(self, pattern: str) -> List[str]:
        return [key for key in list(self._data) if self._live(key) is not None and fnmatchcase(key, pattern)]

    def ping(self) -> bool:
        return True

    def ttl(self, key: str) -> Optional[float]:
        """Seconds left before ``key`` expires, or None when it has no TTL."""
        if self._live(key) is None or key not in self._expires_at:
            return None
        return self._expires_at[key] - self._clock()

    def _live(self, key: str) -> Optional[Union[str, Set[str]]]:
        deadline = self._expires_at.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._data.pop(key, None)
            self._expires_at.pop(key, None)
            return None
        return self._data.get(key)

    def _set_at(self, key: str) -> Optional[Set[str]]:
        value = self._live(key)
        if value is None:
            return None
        if not isinstance(value, set):
            raise KeyValueStoreError(f"WRONGTYPE key {key} does not hold a set")
        return value


class RedisKeyValueStore:
    """Redis-backed store for production use."""

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        socket_timeout: float = 5.0,
        client: Optional[redis.Redis] = None,
    ):
        """
        Initialize the Redis store.

        Args:
            url: Redis connection URL
            socket_timeout: Socket timeout in seconds
            client: Pre-built client (tests inject a mock here)
        """
        if client is not None:
            self._client = client
        else:
            self._client = redis.Redis.from_url(
                url, decode_responses=True, socket_timeout=socket_timeout
            )
            logger.info(f"Configured Redis store at {url}")

    def get(self, key: str) -> Optional[str]:
        return self._call("get", lambda: self._client.get(key))

    def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        self._call("set", lambda: self._client.set(key, value, ex=ttl_seconds))

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(self._call("delete", lambda: self._client.delete(*keys)))

    def exists(self, key: str) -> bool:
        return bool(self._call("exists", lambda: self._client.exists(key)))

    def sadd(self, key: str, *members: str) -> int:
        if not members:
            return 0
        return int(self._call("sadd", lambda: self._client.sadd(key, *members)))

    def srem(self, key: str, *members: str) -> int:
        if not members:
            return 0
        return int(self._call("srem", lambda: self._client.srem(key, *members)))

    def smembers(self, key: str) -> Set[str]:
        return set(self._call("smembers", lambda: self._client.smembers(key)))

    def sinter(self, keys: List[str]) -> Set[str]:
        if not keys:
            return set()
        return set(self._call("sinter", lambda: self._client.sinter(keys)))

    def scard(self, key: str) -> int:
        return int(self._call("scard", lambda: self._client.scard(key)))

    def scan_keys(self, pattern: str) -> List[str]:
        return list(self._call("scan", lambda: list(self._client.scan_iter(match=pattern, count=500))))

    def ping(self) -> bool:
        return bool(self._call("ping", self._client.ping))

    def close(self) -> None:
        """Close the Redis connection pool."""
        self._client.close()

    def _call(self, operation: str, fn: Callable[[], object]):
        try:
            return fn()
        except redis.RedisError as e:
            logger.error(f"Redis {operation} failed: {e}")
            raise KeyValueStoreError(f"Redis {operation} failed: {e}") from e


def create_kv_store(
    backend: str = "memory",
    redis_url: str = "redis://localhost:6379/0",
    socket_timeout: float = 5.0,
    clock: Optional[Clock] = None,
) -> KeyValueStore:
    """
    Factory function to create the appropriate store client.

    Args:
        backend: "memory" for the in-process stub, "redis" for a Redis server
        redis_url: Redis connection URL (used if backend="redis")
        socket_timeout: Redis socket timeout in seconds
        clock: Time source for stub expiry

    Returns:
        KeyValueStore implementation (stub or Redis)
    """
    if backend == "memory":
        logger.info("Using in-memory key-value store")
        return InMemoryKeyValueStore(clock=clock)
    if backend == "redis":
        return RedisKeyValueStore(url=redis_url, socket_timeout=socket_timeout)
    raise ValueError(f"Unknown store backend: {backend}")


def iter_chunks(items: Iterable[str], size: int) -> Iterable[List[str]]:
    """Yield ``items`` in lists of at most ``size`` elements."""
    chunk: List[str] = []
    for item in items:
        chunk.append(item)
        if len(chunk) >= size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk
