"""Response DTOs for the proxy's own endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class ProxyErrorResponse(BaseModel):
    """Body returned when a request could not be resolved."""

    error: str = Field("Proxy request failed", description="Short error summary")
    details: str = Field(..., description="Human-readable failure reason")


class CacheClearResponse(BaseModel):
    """Response DTO for cache clear operation."""

    success: bool = Field(..., description="Whether the operation succeeded")
    deleted_count: int = Field(..., description="Number of entries removed", ge=0)
    message: str = Field(..., description="Human-readable status message")


class CacheDeleteResponse(BaseModel):
    """Response DTO for single-entry eviction."""

    success: bool = Field(..., description="Whether the entry was removed")
    key: str = Field(..., description="Cache key that was evicted")
    message: str = Field(..., description="Human-readable status message")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    total_entries: int = Field(
        ...,
        description="Number of live cached entries",
        ge=0,
    )
    ttl_seconds: int = Field(
        ...,
        description="Time-to-live for new entries in seconds (0 = never expire)",
        ge=0,
    )
    cache_file: str = Field(..., description="Location of the durable snapshot")
    persisted: bool = Field(..., description="Whether the snapshot file currently exists")
    origin: str | None = Field(None, description="Origin requests are forwarded to")
    key_headers: list[str] = Field(
        default_factory=list,
        description="Headers that take part in cache keys (empty = all)",
    )
    metrics: dict[str, Any] = Field(
        default_factory=dict,
        description="Hit/miss/error counters since startup or last clear",
    )


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether the snapshot location is writable")
