"""FastAPI application for the caching proxy.

Every path outside ``/__proxy`` is forwarded to the origin. The prefix
holds the proxy's own health, stats and cache eviction endpoints.
"""

import httpx
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from caching_proxy import __version__
from caching_proxy.api.dependencies import HandlerDep, lifespan
from caching_proxy.config import Settings, settings
from caching_proxy.dto import (
    CacheClearResponse,
    CacheDeleteResponse,
    CacheStatsResponse,
    HealthCheckResponse,
)

ADMIN_PREFIX = "/__proxy"

PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

admin_router = APIRouter(prefix=ADMIN_PREFIX, tags=["admin"])
proxy_router = APIRouter()


@admin_router.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@admin_router.get("/stats", response_model=CacheStatsResponse)
async def get_stats(handler: HandlerDep) -> CacheStatsResponse:
    """Get cache statistics and hit/miss counters."""
    return await handler.get_stats()


@admin_router.delete("/cache", response_model=CacheClearResponse)
async def clear_cache(handler: HandlerDep) -> CacheClearResponse:
    """Clear all entries and delete the snapshot file."""
    return await handler.clear_cache()


@admin_router.delete("/cache/{key}", response_model=CacheDeleteResponse)
async def delete_entry(key: str, handler: HandlerDep) -> CacheDeleteResponse:
    """Evict one entry by its cache key."""
    return await handler.delete_entry(key)


@proxy_router.api_route("/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
async def proxy(request: Request, handler: HandlerDep) -> JSONResponse:
    """Forward a request to the origin, or serve it from the cache."""
    return await handler.proxy(request)


def create_app(
    app_settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        app_settings: Settings to run with. Defaults to the environment.
        transport: Custom httpx transport for the upstream client (tests).

    Returns:
        Configured FastAPI app; services are created in its lifespan
    """
    app = FastAPI(
        title="Caching Proxy",
        description="Forwarding HTTP proxy that caches origin responses",
        version=__version__,
        lifespan=lifespan,
        docs_url=f"{ADMIN_PREFIX}/docs",
        redoc_url=None,
        openapi_url=f"{ADMIN_PREFIX}/openapi.json",
    )
    app.state.settings = app_settings or settings
    app.state.transport = transport

    app.include_router(admin_router)
    app.include_router(proxy_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "caching_proxy.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
    )
