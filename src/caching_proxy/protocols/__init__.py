"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (JSON file → embedded store, httpx → another client)
- Unit testing with fake implementations
- Clear separation of concerns
"""

from .cache_store import CacheStore
from .forwarder import Forwarder

__all__ = [
    "CacheStore",
    "Forwarder",
]
