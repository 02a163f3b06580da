"""
Caché en memoria con TTL para agregados de solo lectura (dashboard).

- get/put/forget sobre claves string, seguro con varios hilos (threadpool de FastAPI)
- la expiración es la única invalidación: los datos pueden quedar atrasados hasta el TTL
- sin protección contra estampida; dos peticiones simultáneas pueden recalcular
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable, Dict, Optional


@dataclass
class CacheEntry:
    value: Any
    ttl_seconds: float
    created_at: float = field(default_factory=time.monotonic)

    def is_expired(self) -> bool:
        return time.monotonic() - self.created_at > self.ttl_seconds


class TTLCache:
    def __init__(self, max_size: int = 256):
        self._cache: Dict[str, CacheEntry] = {}
        self._max_size = max_size
        self._lock = Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired():
                del self._cache[key]
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            if len(self._cache) >= self._max_size and key not in self._cache:
                oldest_key = next(iter(self._cache))
                del self._cache[oldest_key]
            self._cache[key] = CacheEntry(value=value, ttl_seconds=ttl_seconds)

    def forget(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def remember(self, key: str, ttl_seconds: float, producer: Callable[[], Any]) -> Any:
        """Devuelve el valor cacheado o lo calcula con `producer` y lo guarda."""
        value = self.get(key)
        if value is None:
            value = producer()
            self.put(key, value, ttl_seconds)
        return value

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "backend": "in-memory",
                "size": len(self._cache),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / total if total > 0 else 0.0,
            }


cache = TTLCache()


def get_cache() -> TTLCache:
    return cache
