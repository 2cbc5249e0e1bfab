"""
Dish search & recommendation engine.

Responsibilities:
- Filter, score, sort and facet a catalog snapshot of dishes and cooks.
- Produce time-of-day aware recommendation buckets.
- Produce per-user personalized dish and cook recommendations.
- Expose everything through a thin FastAPI transport.
"""
