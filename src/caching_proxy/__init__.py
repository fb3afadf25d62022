"""Caching Proxy - forwarding HTTP proxy that memoizes origin responses.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (CacheStore, Forwarder)
    - repositories: JSON snapshot entry store and httpx upstream client
    - services: The caching decision pipeline (ProxyService)
    - handlers: HTTP request/response handling
    - dto: Data transfer objects (admin API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from caching_proxy.repositories import FileCacheRepository, HttpxForwarder
    from caching_proxy.services import ProxyService

    service = ProxyService.create(
        repository=FileCacheRepository.create(),
        forwarder=HttpxForwarder.create(origin="https://dummyjson.com"),
    )
    ```

For the HTTP server:
    ```python
    from caching_proxy.api.app import create_app
    ```
"""

__version__ = "0.1.0"

from caching_proxy.config import Settings, get_settings, settings
from caching_proxy.entities import CacheEntry, CacheStatus, RequestDescriptor, Resolution, UpstreamResult
from caching_proxy.exceptions import CachingProxyError, StoreReadError, StoreWriteError, UpstreamError
from caching_proxy.handlers import ProxyHandler
from caching_proxy.protocols import CacheStore, Forwarder
from caching_proxy.repositories import FileCacheRepository, HttpxForwarder
from caching_proxy.services import ProxyService
from caching_proxy.utils import derive_key

__all__ = [
    "__version__",
    # Configuration
    "Settings",
    "get_settings",
    "settings",
    # Protocols (interfaces)
    "CacheStore",
    "Forwarder",
    # Services (business logic)
    "ProxyService",
    # Handlers (HTTP)
    "ProxyHandler",
    # Repositories (data access)
    "FileCacheRepository",
    "HttpxForwarder",
    # Entities (domain models)
    "CacheEntry",
    "CacheStatus",
    "RequestDescriptor",
    "Resolution",
    "UpstreamResult",
    # Errors
    "CachingProxyError",
    "StoreReadError",
    "StoreWriteError",
    "UpstreamError",
    # Keys
    "derive_key",
]
