"""HTTP handlers for proxied requests and cache administration.

Handlers convert between Starlette requests, service calls and HTTP
responses. They own HTTP concerns: the X-Cache header, status codes and
error bodies.
"""

import asyncio
import logging

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from caching_proxy.dto import (
    CacheClearResponse,
    CacheDeleteResponse,
    CacheStatsResponse,
    HealthCheckResponse,
    ProxyErrorResponse,
)
from caching_proxy.entities import RequestDescriptor
from caching_proxy.exceptions import CachingProxyError
from caching_proxy.services import ProxyService

logger = logging.getLogger(__name__)

CACHE_STATUS_HEADER = "X-Cache"


def describe_request(request: Request) -> RequestDescriptor:
    """Capture method, path+query and headers of an inbound request.

    The target is taken from the raw ASGI path and query string so that
    percent-escapes such as %2F and %3F reach the key and the origin intact.
    """
    raw_path = request.scope.get("raw_path")
    target = raw_path.decode("latin-1") if raw_path else request.url.path
    query_string = request.scope.get("query_string", b"")
    if query_string:
        target = f"{target}?{query_string.decode('latin-1')}"
    header_pairs = [
        (name.decode("latin-1"), value.decode("latin-1"))
        for name, value in request.headers.raw
    ]
    return RequestDescriptor.from_pairs(request.method, target, header_pairs)


class ProxyHandler:
    """HTTP handlers for the proxy.

    This handler delegates resolution to ProxyService and handles
    HTTP-specific concerns like:
    - Building the request descriptor
    - Surfacing HIT/MISS in the X-Cache header
    - Turning upstream failures into error responses
    """

    def __init__(self, proxy_service: ProxyService) -> None:
        """Initialize the proxy handler.

        Args:
            proxy_service: The proxy service for business logic (required).
        """
        self._proxy = proxy_service

    async def proxy(self, request: Request) -> JSONResponse:
        """Handle any request outside the admin prefix.

        Args:
            request: The inbound request

        Returns:
            JSON payload with X-Cache, or an error body with the upstream status
        """
        descriptor = describe_request(request)
        try:
            resolution = await self._proxy.resolve(descriptor)
        except Exception as e:
            logger.exception("Unexpected error resolving %s %s", descriptor.method, descriptor.target)
            return self._error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

        if not resolution.ok:
            return self._error_response(resolution.status_code, str(resolution.error))

        return JSONResponse(
            content=resolution.payload,
            headers={CACHE_STATUS_HEADER: resolution.cache_status.value},
        )

    async def clear_cache(self) -> CacheClearResponse:
        """Handle DELETE /__proxy/cache requests.

        Returns:
            CacheClearResponse with the number of entries removed

        Raises:
            HTTPException: If the snapshot could not be removed
        """
        try:
            count = await asyncio.to_thread(self._proxy.clear)
        except CachingProxyError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to clear cache: {e}",
            ) from e

        return CacheClearResponse(
            success=True,
            deleted_count=count,
            message="Cache cleared successfully",
        )

    async def delete_entry(self, key: str) -> CacheDeleteResponse:
        """Handle DELETE /__proxy/cache/{key} requests.

        Raises:
            HTTPException: 404 if no entry has that key, 500 if the snapshot
                could not be rewritten
        """
        try:
            deleted = await asyncio.to_thread(self._proxy.delete, key)
        except CachingProxyError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to delete entry: {e}",
            ) from e

        if not deleted:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No cache entry with key {key}",
            )

        return CacheDeleteResponse(success=True, key=key, message="Entry deleted")

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /__proxy/stats requests."""
        stats = self._proxy.get_stats()

        return CacheStatsResponse(
            total_entries=stats.get("total_entries", 0),
            ttl_seconds=stats.get("ttl", 0),
            cache_file=stats.get("cache_file", ""),
            persisted=stats.get("persisted", False),
            origin=stats.get("origin"),
            key_headers=stats.get("key_headers", []),
            metrics=stats.get("metrics", {}),
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /__proxy/health requests."""
        is_healthy = self._proxy.is_healthy()

        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            cache_healthy=is_healthy,
        )

    @staticmethod
    def _error_response(status_code: int, details: str) -> JSONResponse:
        body = ProxyErrorResponse(details=details)
        return JSONResponse(status_code=status_code, content=body.model_dump())
