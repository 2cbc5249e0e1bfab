"""
Geo layer.

Responsibilities:
- Define the GeoService contract (nearby cooks, delivery fee/time quotes).
- Provide a haversine-based implementation over the catalog's cooks.
"""
