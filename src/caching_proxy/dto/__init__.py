"""Data Transfer Objects for API contracts.

These Pydantic models define the proxy's own external contract (admin
endpoints and error bodies). Proxied payloads are passed through as-is.

Internal domain logic should use entities from the entities package.
"""

from .responses import (
    CacheClearResponse,
    CacheDeleteResponse,
    CacheStatsResponse,
    HealthCheckResponse,
    ProxyErrorResponse,
)

__all__ = [
    "CacheClearResponse",
    "CacheDeleteResponse",
    "CacheStatsResponse",
    "HealthCheckResponse",
    "ProxyErrorResponse",
]
