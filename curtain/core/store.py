"""Feature Store.

Provides store backends consumed by the feature gate:
- Redis store (production, shared connection pool)
- In-memory store (testing, embedded use)

The gate only needs four commands: GET, SADD, SISMEMBER and SMEMBERS.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Set, Union

import redis
from redis.exceptions import RedisError

from curtain.core.feature import percentage_key

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the backing store cannot serve a command."""


class FeatureStore(ABC):
    """Abstract key-value store used by the feature gate."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the string stored at ``key`` or None."""
        pass

    @abstractmethod
    def sadd(self, key: str, member: str) -> None:
        """Add ``member`` to the set at ``key``."""
        pass

    @abstractmethod
    def sismember(self, key: str, member: str) -> bool:
        """Check if ``member`` belongs to the set at ``key``."""
        pass

    @abstractmethod
    def smembers(self, key: str) -> Set[str]:
        """Return every member of the set at ``key``."""
        pass


def _decode(value: Union[str, bytes]) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisFeatureStore(FeatureStore):
    """Redis-backed store borrowing connections from a shared pool.

    The pool belongs to whoever created it; this store never disconnects it.
    """

    def __init__(self, pool: redis.ConnectionPool):
        self._pool = pool

    @classmethod
    def from_url(cls, url: str, **pool_kwargs: Any) -> "RedisFeatureStore":
        """Create a store over a new pool, e.g. ``redis://:p4ssw0rd@10.0.1.1:6380/15``."""
        pool_kwargs.setdefault("decode_responses", True)
        return cls(redis.ConnectionPool.from_url(url, **pool_kwargs))

    @property
    def pool(self) -> redis.ConnectionPool:
        return self._pool

    @contextmanager
    def _connection(self) -> Iterator[redis.Redis]:
        try:
            with redis.Redis(connection_pool=self._pool) as client:
                yield client
        except RedisError as e:
            logger.debug(f"Redis command failed: {e}")
            raise StoreError(f"Redis error: {e}") from e

    def get(self, key: str) -> Optional[str]:
        with self._connection() as client:
            value = client.get(key)
        return None if value is None else _decode(value)

    def sadd(self, key: str, member: str) -> None:
        with self._connection() as client:
            client.sadd(key, member)

    def sismember(self, key: str, member: str) -> bool:
        with self._connection() as client:
            return bool(client.sismember(key, member))

    def smembers(self, key: str) -> Set[str]:
        with self._connection() as client:
            members = client.smembers(key)
        return {_decode(m) for m in members}


class InMemoryFeatureStore(FeatureStore):
    """In-memory store for tests and single-process use.

    Set ``available`` to False to make every command fail like an unreachable
    server.
    """

    def __init__(self):
        self._values: Dict[str, str] = {}
        self._sets: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()
        self.available = True

    def _check_available(self) -> None:
        if not self.available:
            raise StoreError("In-memory store marked unavailable")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            self._check_available()
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._check_available()
            self._values[key] = value

    def sadd(self, key: str, member: str) -> None:
        with self._lock:
            self._check_available()
            self._sets.setdefault(key, set()).add(member)

    def sismember(self, key: str, member: str) -> bool:
        with self._lock:
            self._check_available()
            return member in self._sets.get(key, ())

    def smembers(self, key: str) -> Set[str]:
        with self._lock:
            self._check_available()
            return set(self._sets.get(key, ()))

    def set_percentage(self, feature: str, percentage: Union[int, str]) -> None:
        """Store a rollout percentage the way an operator would."""
        self.set(percentage_key(feature), str(percentage))

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._sets.clear()


__all__ = [
    "FeatureStore",
    "InMemoryFeatureStore",
    "RedisFeatureStore",
    "StoreError",
]
