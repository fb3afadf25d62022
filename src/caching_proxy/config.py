import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Upstream
    origin: str | None = os.getenv("PROXY_ORIGIN")
    upstream_timeout: float = float(os.getenv("UPSTREAM_TIMEOUT", "30.0"))
    upstream_verify_tls: bool = os.getenv("UPSTREAM_VERIFY_TLS", "true").lower() == "true"

    # Cache
    cache_ttl: int = int(os.getenv("CACHE_TTL", "60"))
    cache_file_path: str = os.getenv(
        "CACHE_FILE_PATH",
        str(Path.home() / ".caching-proxy-cache.json"),
    )
    # Empty means every inbound header takes part in the cache key
    cache_key_headers: tuple[str, ...] = _split_csv(os.getenv("CACHE_KEY_HEADERS", ""))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "3000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def origin_url(self) -> str:
        """Return the configured origin without a trailing slash.

        Raises:
            RuntimeError: If no origin is configured
        """
        if not self.origin:
            raise RuntimeError("No origin configured. Set PROXY_ORIGIN or pass --origin.")
        return self.origin.rstrip("/")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_ttl < 0:
            raise ValueError(f"CACHE_TTL must be zero or positive, got {self.cache_ttl}")

        if self.upstream_timeout <= 0:
            raise ValueError(f"UPSTREAM_TIMEOUT must be positive, got {self.upstream_timeout}")

        if self.origin and not self.origin.startswith(("http://", "https://")):
            raise ValueError(f"Origin must be an http(s) URL, got {self.origin!r}")

        if not 0 < self.api_port < 65536:
            raise ValueError(f"API_PORT must be between 1 and 65535, got {self.api_port}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
