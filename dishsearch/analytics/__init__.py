"""
Search analytics.

Responsibilities:
- Keep recent search queries and per-query popularity counts.
- Record one event per search with filter usage and timing.
- Aggregate those events into a dashboard-friendly summary.
"""
