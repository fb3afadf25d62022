"""Cache key derivation.

A key is the MD5 hex digest of the JSON serialization of the request's
method, target and headers. Headers are serialized in the order they were
received, so two requests only share a key when their header sets match
exactly. Client-specific headers (user agents, auth tokens, cache-control
negotiation) therefore fragment the cache; pass ``key_headers`` to key on
an explicit allow-list instead.
"""

import hashlib
import json
from collections.abc import Iterable

from caching_proxy.entities import RequestDescriptor


def serialize_descriptor(
    descriptor: RequestDescriptor,
    key_headers: Iterable[str] | None = None,
) -> bytes:
    """Serialize a descriptor into the canonical byte sequence that is hashed."""
    # JSON object keys must be strings
    headers = {str(k): v for k, v in descriptor.headers.items()}
    if key_headers:
        allowed = {name.lower() for name in key_headers}
        headers = {k: v for k, v in headers.items() if k.lower() in allowed}

    key_data = {
        "method": descriptor.method,
        "url": descriptor.target,
        "headers": headers,
    }
    # default=str keeps derivation total for values json cannot encode
    return json.dumps(key_data, separators=(",", ":"), default=str).encode()


def derive_key(
    descriptor: RequestDescriptor,
    key_headers: Iterable[str] | None = None,
) -> str:
    """Derive the cache key for a request.

    Args:
        descriptor: The inbound request identity
        key_headers: Optional allow-list of header names; None or empty
            includes every header

    Returns:
        A 32-character lower-case hex string
    """
    raw = serialize_descriptor(descriptor, key_headers)
    return hashlib.md5(raw, usedforsecurity=False).hexdigest()
