from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")

_DEFAULT_TTL = 300  # 5 minutes
_DEFAULT_MAX_SIZE = 1000


def make_key(request: Any) -> str:
    normalized = json.dumps(request, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


class TTLCache:
    """
    Optional read-through cache placed around engine calls.

    The engine never depends on it; wrapping a call only changes latency.
    When full, the oldest entry is evicted.
    """

    def __init__(
        self,
        ttl: float = _DEFAULT_TTL,
        max_size: int = _DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, dict[str, Any]] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def get(self, request: Any) -> Any | None:
        key = make_key(request)
        with self._lock:
            entry = self._entries.get(key)
            if entry and self._clock() < entry["expires_at"]:
                self._hits += 1
                return entry["value"]
            if entry:
                del self._entries[key]
            self._misses += 1
            return None

    def set(self, request: Any, value: Any, ttl: float | None = None) -> None:
        key = make_key(request)
        now = self._clock()
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                oldest = min(self._entries, key=lambda k: self._entries[k]["created_at"])
                del self._entries[oldest]
            self._entries[key] = {
                "value": value,
                "created_at": now,
                "expires_at": now + (ttl if ttl is not None else self.ttl),
            }

    async def cached(
        self,
        request: Any,
        producer: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        """
        Return the cached value for *request*, awaiting *producer* on a miss.

        Empty results are returned but not stored.
        """
        value = self.get(request)
        if value is not None:
            return value
        value = await producer()
        if value:
            self.set(request, value, ttl)
        return value

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
