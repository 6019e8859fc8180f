from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple


DEFAULT_TTL = 300


class CacheBackend(Protocol):
    """String key/value store with per-entry expiry."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        ...


class WeatherCache:
    """In-process TTL cache; expired entries are dropped on read."""

    def __init__(
        self,
        default_ttl: int = DEFAULT_TTL,
        time_func: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self._time_func = time_func
        self._storage: Dict[str, Tuple[float, str]] = {}

    def get(self, key: str) -> Optional[str]:
        item = self._storage.get(key)
        if not item:
            return None
        expires_at, value = item
        if self._time_func() >= expires_at:
            self._storage.pop(key, None)
            return None
        return value

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        self._storage[key] = (self._time_func() + ttl, value)

    def clear(self) -> None:
        self._storage.clear()

    def __len__(self) -> int:
        return len(self._storage)


class DjangoCache:
    """Adapter over a Django cache backend (LocMem, django-redis, ...).

    Backend exceptions are not caught: a broken cache server must surface
    instead of being mistaken for a miss.
    """

    def __init__(self, backend: Any, default_ttl: int = DEFAULT_TTL) -> None:
        self._backend = backend
        self.default_ttl = default_ttl

    def get(self, key: str) -> Optional[str]:
        return self._backend.get(key, default=None)

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        self._backend.set(key, value, timeout=ttl)


class RedisCache:
    """Adapter over a ``redis.Redis`` client."""

    def __init__(self, client: Any, default_ttl: int = DEFAULT_TTL) -> None:
        self._client = client
        self.default_ttl = default_ttl

    @classmethod
    def from_url(cls, url: str, default_ttl: int = DEFAULT_TTL) -> "RedisCache":
        import redis

        return cls(redis.Redis.from_url(url, decode_responses=True), default_ttl=default_ttl)

    def get(self, key: str) -> Optional[str]:
        value = self._client.get(key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        self._client.set(key, value, ex=ttl)


__all__ = ["CacheBackend", "DEFAULT_TTL", "DjangoCache", "RedisCache", "WeatherCache"]
