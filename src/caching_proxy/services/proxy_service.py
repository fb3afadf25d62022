"""Proxy service for the caching decision pipeline.

This service orchestrates request resolution by coordinating the
repository (entry store) and the forwarder (upstream calls).
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable

from caching_proxy.config import settings
from caching_proxy.entities import CacheStatus, RequestDescriptor, Resolution, UpstreamResult
from caching_proxy.exceptions import StoreWriteError, UpstreamError
from caching_proxy.models import ProxyMetrics
from caching_proxy.protocols import CacheStore, Forwarder
from caching_proxy.utils import derive_key

logger = logging.getLogger(__name__)

ForwardFn = Callable[[RequestDescriptor], Awaitable[UpstreamResult]]


class ProxyService:
    """Core resolution service.

    This service depends on PROTOCOLS, not concrete implementations:
    - CacheStore: JSON snapshot file, embedded store, etc.
    - Forwarder: httpx or any other async HTTP client

    Resolution never retries and never raises for upstream failures; they
    come back as a Resolution carrying the error. Concurrent misses on the
    same key each reach the origin; the last one to finish wins the entry.

    Example:
        ```python
        from caching_proxy.repositories import FileCacheRepository, HttpxForwarder
        from caching_proxy.services import ProxyService

        service = ProxyService.create(
            repository=FileCacheRepository.create(),
            forwarder=HttpxForwarder.create(origin="https://dummyjson.com"),
        )
        resolution = await service.resolve(RequestDescriptor("GET", "/products/1"))
        ```
    """

    def __init__(
        self,
        repository: CacheStore,
        forwarder: Forwarder | None = None,
        ttl: int | None = None,
        key_headers: Iterable[str] | None = None,
    ) -> None:
        """Initialize the proxy service.

        Args:
            repository: Entry store (required).
            forwarder: Upstream client. Optional when every resolve() call
                passes its own forward function.
            ttl: Time-to-live for new entries in seconds. Defaults to settings.
            key_headers: Header allow-list for cache keys. Defaults to settings;
                empty means every header counts.
        """
        self._repository = repository
        self._forwarder = forwarder
        self._ttl = settings.cache_ttl if ttl is None else ttl
        self._key_headers = tuple(settings.cache_key_headers if key_headers is None else key_headers)
        self._metrics = ProxyMetrics()

    @classmethod
    def create(
        cls,
        repository: CacheStore,
        forwarder: Forwarder | None = None,
        ttl: int | None = None,
        key_headers: Iterable[str] | None = None,
    ) -> "ProxyService":
        """Factory method to create ProxyService with sensible defaults.

        Args:
            repository: Entry store (required).
            forwarder: Upstream client.
            ttl: Entry TTL in seconds. If None, uses settings.
            key_headers: Header allow-list. If None, uses settings.

        Returns:
            Configured ProxyService instance
        """
        return cls(
            repository=repository,
            forwarder=forwarder,
            ttl=ttl,
            key_headers=key_headers,
        )

    def key_for(self, descriptor: RequestDescriptor) -> str:
        """Derive the cache key for a request."""
        return derive_key(descriptor, self._key_headers or None)

    async def resolve(
        self,
        descriptor: RequestDescriptor,
        forward: ForwardFn | None = None,
    ) -> Resolution:
        """Serve a request from the store or from the origin.

        Business logic:
        1. Derive the cache key
        2. Return the stored value on a hit
        3. Otherwise forward without conditional headers
        4. Store a successful body and return it as a miss; a 304 becomes a
           hit if the key got cached meanwhile, else it is re-fetched once

        Args:
            descriptor: The inbound request
            forward: Upstream call; defaults to the configured forwarder

        Returns:
            Resolution with payload and HIT/MISS, or with an UpstreamError
        """
        if forward is None:
            if self._forwarder is None:
                raise RuntimeError("No forwarder configured and none passed to resolve().")
            forward = self._forwarder.forward

        start_time = time.perf_counter()
        key = self.key_for(descriptor)

        entry = self._repository.get(key)
        if entry is not None:
            self._metrics.record_hit(self._elapsed_ms(start_time))
            return Resolution(payload=entry.value, cache_status=CacheStatus.HIT)

        outbound = descriptor.without_conditional_headers()
        try:
            result = await forward(outbound)

            if result.is_not_modified:
                entry = self._repository.get(key)
                if entry is not None:
                    self._metrics.record_hit(self._elapsed_ms(start_time))
                    return Resolution(payload=entry.value, cache_status=CacheStatus.HIT)
                result = await self._refetch(outbound, forward)

            if not result.is_success:
                raise UpstreamError(
                    f"Upstream responded with status {result.status_code}",
                    status_code=result.status_code,
                )
        except UpstreamError as e:
            logger.error("%s %s failed: %s", descriptor.method, descriptor.target, e)
            self._metrics.record_error(self._elapsed_ms(start_time))
            return Resolution(error=e)
        except Exception as e:
            # Custom forward callables may raise anything; report it as a 500
            error = UpstreamError(f"Forwarding failed: {e}")
            error.__cause__ = e
            logger.error("%s %s failed: %s", descriptor.method, descriptor.target, error)
            self._metrics.record_error(self._elapsed_ms(start_time))
            return Resolution(error=error)

        if result.has_body:
            await self._store(key, result.body)

        self._metrics.record_miss(self._elapsed_ms(start_time))
        return Resolution(payload=result.body, cache_status=CacheStatus.MISS)

    async def _refetch(self, outbound: RequestDescriptor, forward: ForwardFn) -> UpstreamResult:
        """Ask again for a full representation after a 304 with nothing cached."""
        logger.info("Got 304 for uncached %s %s, re-fetching", outbound.method, outbound.target)
        result = await forward(outbound.with_header("cache-control", "no-cache"))
        if result.is_not_modified:
            raise UpstreamError(
                "Upstream answered 304 Not Modified with no cached copy to serve",
                status_code=502,
            )
        return result

    async def _store(self, key: str, value) -> None:
        try:
            await asyncio.to_thread(self._repository.set, key, value, self._ttl)
        except StoreWriteError as e:
            logger.warning("Cached %s in memory only: %s", key, e)

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000

    def clear(self) -> int:
        """Clear all cache entries and the snapshot file.

        Returns:
            Number of entries deleted
        """
        count = self._repository.clear()
        self._metrics = ProxyMetrics()
        return count

    def delete(self, key: str) -> bool:
        """Evict a single entry by key.

        Returns:
            True if an entry was removed
        """
        return self._repository.delete(key)

    def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with store statistics and request metrics
        """
        stats = self._repository.get_stats()
        stats["ttl"] = self._ttl
        stats["key_headers"] = list(self._key_headers)
        stats["origin"] = self._forwarder.origin if self._forwarder is not None else None
        stats["metrics"] = self._metrics.to_dict()
        return stats

    def is_healthy(self) -> bool:
        """Check if the store can persist."""
        return self._repository.health_check()

    @property
    def ttl(self) -> int:
        """Get the TTL applied to new entries."""
        return self._ttl

    @property
    def metrics(self) -> ProxyMetrics:
        """Get the request metrics."""
        return self._metrics

    @property
    def repository(self) -> CacheStore:
        """Get the underlying repository (for testing)."""
        return self._repository

    @property
    def forwarder(self) -> Forwarder | None:
        """Get the underlying forwarder (for testing)."""
        return self._forwarder
