"""Utility modules for the caching proxy."""

from .cache_key import derive_key, serialize_descriptor

__all__ = [
    "derive_key",
    "serialize_descriptor",
]
