"""
HTTP Client Module

Async HTTP client used for challenge delivery.
"""

from .client import AsyncHttpClient, HttpError, HttpResponse

__all__ = [
    "AsyncHttpClient",
    "HttpError",
    "HttpResponse",
]
