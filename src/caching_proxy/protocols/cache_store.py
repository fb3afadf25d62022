"""Cache storage protocol.

Defines the interface for the entry store that holds upstream payloads by
cache key with per-entry expiry and a durable snapshot.

Implementations can include:
- JSON snapshot file (default)
- An embedded key-value store
- A shared cache server
"""

from typing import Any, Protocol, runtime_checkable

from caching_proxy.entities import CacheEntry


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol, no
    explicit inheritance needed. Implementations must be safe to call from
    several threads at once.
    """

    def get(self, key: str) -> CacheEntry | None:
        """Look up a live entry.

        Args:
            key: The cache key

        Returns:
            The entry, or None if absent or expired
        """
        ...

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store a value, overwriting any existing entry, and persist it.

        Args:
            key: The cache key
            value: JSON-serializable payload
            ttl_seconds: Lifetime in seconds; None uses the store default

        Raises:
            StoreWriteError: If persisting failed (the entry is still set)
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete a specific entry by key.

        Returns:
            True if deleted, False otherwise
        """
        ...

    def clear(self) -> int:
        """Remove every entry and the durable snapshot.

        Returns:
            Number of entries removed
        """
        ...

    def snapshot(self) -> dict[str, Any]:
        """Return a serializable key to value mapping of live entries."""
        ...

    def restore(self, data: Any) -> None:
        """Replace the contents with a previously produced snapshot.

        Raises:
            StoreReadError: If the data is malformed (the store is left empty)
        """
        ...

    def count_all(self) -> int:
        """Count live entries."""
        ...

    def health_check(self) -> bool:
        """Check if the durable location is usable."""
        ...

    def get_stats(self) -> dict:
        """Get store statistics (implementation-specific)."""
        ...
