from __future__ import annotations

import threading
import time
from collections import Counter, deque
from typing import Any

_MAX_HISTORY = 100
_MAX_EVENTS = 10_000


class SearchHistoryStore:
    """
    Counter store for search queries and search events.

    Owned by whoever builds the search service and passed in explicitly;
    every mutation happens under a lock so concurrent searches can share it.
    """

    def __init__(self, max_history: int = _MAX_HISTORY, max_events: int = _MAX_EVENTS) -> None:
        self._history: deque[str] = deque(maxlen=max_history)
        self._popularity: Counter[str] = Counter()
        self._events: deque[dict[str, Any]] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def record_query(self, query: str) -> None:
        with self._lock:
            self._history.appendleft(query)
            self._popularity[query] += 1

    def record_event(self, event_type: str, data: dict[str, Any]) -> None:
        with self._lock:
            self._events.append({
                "type": event_type,
                "timestamp": time.time(),
                **data,
            })

    def recent_queries(self, limit: int = 10) -> list[str]:
        with self._lock:
            return list(self._history)[:limit]

    def popular_queries(self, limit: int = 10) -> list[tuple[str, int]]:
        with self._lock:
            return self._popularity.most_common(limit)

    def get_events(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._history.clear()
            self._popularity.clear()
            self._events.clear()
