"""Repository layer for data access.

This layer abstracts external dependencies (the snapshot file, the origin
server) behind protocol-based interfaces. The repositories are
protocol-based (structural typing), not inheritance-based. Any class
implementing the required methods will satisfy the protocol.
"""

from caching_proxy.protocols import CacheStore, Forwarder

from .file_repository import FileCacheRepository
from .httpx_forwarder import HttpxForwarder

__all__ = [
    "CacheStore",
    "Forwarder",
    "FileCacheRepository",
    "HttpxForwarder",
]
