"""
Recommendation engine.

Responsibilities:
- Classify the wall-clock hour into a time-of-day context.
- Derive per-dish signals (popularity, trending, new, premium, quick bite).
- Build eight independently capped recommendation buckets.
- Score dishes and cooks for a single user from their recorded behaviour.
"""
