"""
Search engine.

Responsibilities:
- Reduce the catalog with a fixed sequence of hard filters.
- Score every surviving dish and attach human-readable match reasons.
- Sort by a selectable key and aggregate facets over the filtered set.
- Never raise to callers: failures become empty, valid results.
"""
