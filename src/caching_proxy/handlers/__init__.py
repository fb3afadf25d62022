"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .proxy_handler import CACHE_STATUS_HEADER, ProxyHandler, describe_request

__all__ = [
    "CACHE_STATUS_HEADER",
    "ProxyHandler",
    "describe_request",
]
