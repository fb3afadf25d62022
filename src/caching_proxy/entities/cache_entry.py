"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """Domain entity for a cached upstream payload.

    Owned by the entry store. An entry with ``ttl_seconds == 0`` never expires.

    Attributes:
        key: The cache key the entry is stored under
        value: The upstream response body (JSON document or text)
        inserted_at: Unix timestamp of insertion
        ttl_seconds: Lifetime in seconds
    """

    key: str
    value: Any
    inserted_at: float
    ttl_seconds: int

    @property
    def expires_at(self) -> float | None:
        """Timestamp after which the entry is expired, or None if it never expires."""
        if self.ttl_seconds <= 0:
            return None
        return self.inserted_at + self.ttl_seconds

    def is_expired(self, now: float) -> bool:
        """Check whether the entry is expired at ``now``."""
        expires_at = self.expires_at
        return expires_at is not None and now > expires_at
