"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Settings (and an optional test transport) are put on app.state by create_app
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from caching_proxy.config import Settings, get_settings
from caching_proxy.handlers import ProxyHandler
from caching_proxy.repositories import FileCacheRepository, HttpxForwarder
from caching_proxy.services import ProxyService

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> ProxyHandler:
    """Dependency injection for ProxyHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "proxy_handler", None)
    if handler is None:
        raise RuntimeError("ProxyHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers once and stores them in app.state:
    1. Repository (entry store) - snapshot restored from disk
    2. Forwarder (upstream client)
    3. Service (resolution) - stored in app.state.proxy_service
    4. Handler (HTTP endpoints) - stored in app.state.proxy_handler

    Raises:
        RuntimeError: If no origin is configured
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    transport = getattr(app.state, "transport", None)

    repository = FileCacheRepository(
        file_path=settings.cache_file_path,
        ttl=settings.cache_ttl,
    )
    repository.load()

    forwarder = HttpxForwarder(
        origin=settings.origin_url,
        timeout=settings.upstream_timeout,
        verify_tls=settings.upstream_verify_tls,
        transport=transport,
    )

    proxy_service = ProxyService.create(
        repository=repository,
        forwarder=forwarder,
        ttl=settings.cache_ttl,
        key_headers=settings.cache_key_headers,
    )
    proxy_handler = ProxyHandler(proxy_service=proxy_service)

    app.state.proxy_service = proxy_service
    app.state.proxy_handler = proxy_handler
    app.state.repository = repository
    app.state.forwarder = forwarder

    logger.info("Proxying to %s (ttl=%ss, cache file %s)", forwarder.origin, proxy_service.ttl, repository.path)

    yield

    await forwarder.close()
    del app.state.proxy_handler
    del app.state.proxy_service
    del app.state.repository
    del app.state.forwarder
    logger.info("Caching proxy shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[ProxyHandler, Depends(get_handler)]
