"""Upstream result and resolution outcome entities."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from caching_proxy.exceptions import UpstreamError


class CacheStatus(str, Enum):
    """Whether a payload came from the store or from a fresh forward."""

    HIT = "HIT"
    MISS = "MISS"


@dataclass(frozen=True)
class UpstreamResult:
    """A response received from the origin.

    Attributes:
        status_code: HTTP status returned by the origin
        body: Decoded JSON document, text, or None when the body was empty
        headers: Response headers from the origin
    """

    status_code: int
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_not_modified(self) -> bool:
        return self.status_code == 304

    @property
    def has_body(self) -> bool:
        return self.body is not None and self.body != ""


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one request.

    Exactly one of ``cache_status`` and ``error`` is set.
    """

    payload: Any = None
    cache_status: CacheStatus | None = None
    error: UpstreamError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        """HTTP status to answer the client with."""
        if self.error is not None:
            return self.error.effective_status
        return 200
