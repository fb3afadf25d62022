"""Error taxonomy for the caching proxy.

Store errors are recovered close to where they happen (a corrupt snapshot
becomes an empty cache, a failed write keeps the in-memory entry).
Upstream errors travel to the HTTP layer, which turns them into an error
response carrying the best-known status code.
"""


class CachingProxyError(Exception):
    """Base class for all caching proxy errors."""


class StoreReadError(CachingProxyError):
    """The durable snapshot could not be read or parsed."""


class StoreWriteError(CachingProxyError):
    """The durable snapshot could not be written.

    Attributes:
        path: The snapshot file that failed to persist
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class UpstreamError(CachingProxyError):
    """The origin could not be reached or answered with an unusable status.

    Attributes:
        status_code: The upstream status, or None if no response was received
    """

    DEFAULT_STATUS = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def effective_status(self) -> int:
        """Status code to report to the client."""
        return self.status_code or self.DEFAULT_STATUS
