"""Key/value stores with per-key TTL used to hold the bulk datasets.

``MemoryStore`` keeps everything in-process and is the default backend.
``RedisStore`` wraps a ``redis-py`` client so several processes can share the
same cached datasets.
"""

from __future__ import annotations

import threading
import time
from typing import Dict, Optional, Protocol, Tuple

import redis


class CacheStore(Protocol):
    def set(self, key: str, value: str) -> None: ...

    def get(self, key: str) -> Optional[str]: ...

    def expire(self, key: str, ttl: int) -> None: ...

    def exists(self, key: str) -> bool: ...

    def delete(self, key: str) -> None: ...

    def size_of(self, key: str) -> Optional[int]: ...

    def acquire_lock(self, key: str, ttl: int) -> bool: ...

    def release_lock(self, key: str) -> None: ...


class MemoryStore:
    """Thread-safe in-process store; ``set`` keeps a key until ``expire`` is called."""

    def __init__(self):
        self._lock = threading.RLock()
        # key -> (value, expires_at_monotonic or None)
        self._map: Dict[str, Tuple[str, Optional[float]]] = {}

    def _purge_expired(self) -> None:
        now = time.monotonic()
        dead = [k for k, (_, exp) in self._map.items() if exp is not None and exp <= now]
        for k in dead:
            self._map.pop(k, None)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._map[key] = (value, None)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            self._purge_expired()
            pair = self._map.get(key)
            return None if pair is None else pair[0]

    def expire(self, key: str, ttl: int) -> None:
        with self._lock:
            pair = self._map.get(key)
            if pair is None:
                return
            if ttl <= 0:
                self._map.pop(key, None)
                return
            self._map[key] = (pair[0], time.monotonic() + ttl)

    def exists(self, key: str) -> bool:
        with self._lock:
            self._purge_expired()
            return key in self._map

    def delete(self, key: str) -> None:
        with self._lock:
            self._map.pop(key, None)

    def size_of(self, key: str) -> Optional[int]:
        value = self.get(key)
        return None if value is None else len(value.encode("utf-8"))

    def acquire_lock(self, key: str, ttl: int) -> bool:
        with self._lock:
            self._purge_expired()
            if key in self._map:
                return False
            self._map[key] = ("1", time.monotonic() + max(1, ttl))
            return True

    def release_lock(self, key: str) -> None:
        self.delete(key)

    def clear(self) -> None:
        with self._lock:
            self._map.clear()


class RedisStore:
    """Adapter over a ``redis.Redis`` client."""

    def __init__(self, client: "redis.Redis"):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisStore":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def set(self, key: str, value: str) -> None:
        self.client.set(key, value)

    def get(self, key: str) -> Optional[str]:
        value = self.client.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def expire(self, key: str, ttl: int) -> None:
        self.client.expire(key, ttl)

    def exists(self, key: str) -> bool:
        return bool(self.client.exists(key))

    def delete(self, key: str) -> None:
        self.client.delete(key)

    def size_of(self, key: str) -> Optional[int]:
        return self.client.memory_usage(key)

    def acquire_lock(self, key: str, ttl: int) -> bool:
        return bool(self.client.set(key, "1", nx=True, ex=max(1, ttl)))

    def release_lock(self, key: str) -> None:
        self.client.delete(key)


__all__ = ["CacheStore", "MemoryStore", "RedisStore"]
