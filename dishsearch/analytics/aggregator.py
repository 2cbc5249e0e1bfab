from __future__ import annotations

from collections import Counter
from typing import Any

from .store import SearchHistoryStore

_FILTER_KEYS = ("category", "price_range", "rating", "prep_time", "dietary", "allergens", "location")


def compute_analytics(store: SearchHistoryStore) -> dict[str, Any]:
    searches = [e for e in store.get_events() if e["type"] == "search"]
    total = len(searches)

    # Average response time
    times = [s["search_time_ms"] for s in searches if "search_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Zero-result rate
    empty = sum(1 for s in searches if s.get("total_results", 0) == 0)

    # Top categories requested
    category_counter: Counter[str] = Counter()
    for s in searches:
        if s.get("category"):
            category_counter[s["category"]] += 1
    top_categories = [{"name": n, "count": c} for n, c in category_counter.most_common(10)]

    # Filter usage rates
    filter_counts = {k: 0 for k in _FILTER_KEYS}
    for s in searches:
        for key in _FILTER_KEYS:
            if s.get(key):
                filter_counts[key] += 1
    filter_usage = {
        k: round(v / total * 100, 1) if total else 0.0
        for k, v in filter_counts.items()
    }

    return {
        "total_searches": total,
        "avg_search_time_ms": avg_time,
        "zero_result_rate": round(empty / total * 100, 1) if total else 0.0,
        "recent_searches": store.recent_queries(10),
        "popular_searches": [
            {"query": q, "count": c} for q, c in store.popular_queries(10)
        ],
        "top_categories": top_categories,
        "filter_usage": filter_usage,
    }
