from __future__ import annotations


class UpstreamDataError(RuntimeError):
    """Catalog or cook lookup failed (I/O error, timeout, unreadable data)."""


class ConfigurationError(ValueError):
    """Filter or option input could not be validated."""
