"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_entry import CacheEntry
from .request_descriptor import CONDITIONAL_HEADERS, RequestDescriptor
from .resolution import CacheStatus, Resolution, UpstreamResult

__all__ = [
    "CONDITIONAL_HEADERS",
    "CacheEntry",
    "CacheStatus",
    "RequestDescriptor",
    "Resolution",
    "UpstreamResult",
]
