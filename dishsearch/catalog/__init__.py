"""
Catalog access layer.

Responsibilities:
- Define the CatalogAccess contract the engine consumes.
- Normalize raw store documents into well-typed Dish and Cook records.
- Provide file-backed and in-memory catalog adapters.
"""
