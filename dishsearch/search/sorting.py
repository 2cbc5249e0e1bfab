from __future__ import annotations

from .models import ScoredDish, SortKey


def sort_results(items: list[ScoredDish], sort_by: SortKey = SortKey.relevance) -> list[ScoredDish]:
    """Stable sort; ties keep catalog order."""
    if sort_by == SortKey.price_low:
        return sorted(items, key=lambda i: i.dish.price)
    if sort_by == SortKey.price_high:
        return sorted(items, key=lambda i: i.dish.price, reverse=True)
    if sort_by == SortKey.rating:
        return sorted(items, key=lambda i: i.dish.rating, reverse=True)
    if sort_by == SortKey.prep_time:
        return sorted(items, key=lambda i: i.dish.prep_time_minutes)
    if sort_by == SortKey.distance:
        # Missing distance counts as 0 and sorts first.
        return sorted(items, key=lambda i: i.distance_km or 0.0)
    return sorted(items, key=lambda i: i.score, reverse=True)
