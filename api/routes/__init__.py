"""API route handlers."""

from api.routes import health, stats, verify

__all__ = ["health", "stats", "verify"]
