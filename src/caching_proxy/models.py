from dataclasses import dataclass


@dataclass
class ProxyMetrics:
    """Track hit/miss/error counts for resolved requests."""

    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    upstream_errors: int = 0
    total_resolve_time_ms: float = 0.0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate over successful resolutions."""
        served = self.cache_hits + self.cache_misses
        if served == 0:
            return 0.0
        return self.cache_hits / served

    @property
    def avg_resolve_time_ms(self) -> float:
        """Calculate average resolve time."""
        if self.total_requests == 0:
            return 0.0
        return self.total_resolve_time_ms / self.total_requests

    def record_hit(self, resolve_time_ms: float) -> None:
        """Record a cache hit."""
        self.total_requests += 1
        self.cache_hits += 1
        self.total_resolve_time_ms += resolve_time_ms

    def record_miss(self, resolve_time_ms: float) -> None:
        """Record a cache miss."""
        self.total_requests += 1
        self.cache_misses += 1
        self.total_resolve_time_ms += resolve_time_ms

    def record_error(self, resolve_time_ms: float) -> None:
        """Record a failed upstream resolution."""
        self.total_requests += 1
        self.upstream_errors += 1
        self.total_resolve_time_ms += resolve_time_ms

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary."""
        return {
            "total_requests": self.total_requests,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "upstream_errors": self.upstream_errors,
            "hit_rate": self.hit_rate,
            "avg_resolve_time_ms": self.avg_resolve_time_ms,
        }
