"""Service layer for business logic.

This layer contains the caching decision pipeline. Services depend on
protocols (interfaces), not concrete implementations, making them
testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .proxy_service import ForwardFn, ProxyService

__all__ = [
    "ForwardFn",
    "ProxyService",
]
