"""httpx-based upstream forwarder.

Replays an inbound request against the configured origin and hands the
response back without judging its status; the resolver decides what a
status means. Only transport failures (DNS, refused connection, timeout)
raise.
"""

import logging
from urllib.parse import urlsplit

import httpx

from caching_proxy.config import settings
from caching_proxy.entities import RequestDescriptor, UpstreamResult
from caching_proxy.exceptions import UpstreamError

logger = logging.getLogger(__name__)

# Connection-level and framing headers are recomputed by httpx
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-connection",
        "transfer-encoding",
        "content-length",
        "upgrade",
        "te",
        "trailer",
    }
)


def decode_body(response: httpx.Response):
    """Decode an upstream body the way the cache stores it.

    Returns:
        The parsed JSON document, the text if it is not JSON, or None if empty
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxForwarder:
    """httpx implementation of the Forwarder protocol.

    This class satisfies the Forwarder protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        forwarder = HttpxForwarder.create(origin="https://dummyjson.com")
        result = await forwarder.forward(RequestDescriptor("GET", "/products/1"))
        print(result.status_code, result.body)
        await forwarder.close()
        ```
    """

    def __init__(
        self,
        origin: str | None = None,
        timeout: float | None = None,
        verify_tls: bool | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the forwarder.

        Args:
            origin: Base URL of the origin. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.
            verify_tls: Verify the origin's certificate. Defaults to settings.
            transport: Custom httpx transport (e.g., httpx.MockTransport in tests).
        """
        self._origin = (origin or settings.origin_url).rstrip("/")
        self._host = urlsplit(self._origin).netloc
        self._timeout = timeout or settings.upstream_timeout
        self._verify_tls = settings.upstream_verify_tls if verify_tls is None else verify_tls
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        origin: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpxForwarder":
        """Factory method to create HttpxForwarder with defaults.

        Args:
            origin: Origin URL. If None, uses settings.
            transport: Optional custom transport.

        Returns:
            Configured HttpxForwarder
        """
        return cls(origin=origin, transport=transport)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                verify=self._verify_tls,
                follow_redirects=True,
                transport=self._transport,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def origin(self) -> str:
        """Get the origin base URL."""
        return self._origin

    def build_url(self, descriptor: RequestDescriptor) -> str:
        """Join the origin and the request target."""
        target = descriptor.target or "/"
        if not target.startswith("/"):
            target = f"/{target}"
        return f"{self._origin}{target}"

    def build_headers(self, descriptor: RequestDescriptor) -> list[tuple[str, str]]:
        """Outbound headers: inbound ones minus hop-by-hop, with the origin's host."""
        headers: list[tuple[str, str]] = []
        for name, value in descriptor.headers.items():
            lowered = name.lower()
            if lowered in HOP_BY_HOP_HEADERS or lowered == "host":
                continue
            if isinstance(value, list):
                value = ", ".join(value)
            headers.append((name, value))
        headers.append(("host", self._host))
        return headers

    async def forward(self, descriptor: RequestDescriptor) -> UpstreamResult:
        """Send the request to the origin.

        Args:
            descriptor: The request to replay

        Returns:
            UpstreamResult with the origin's status, decoded body and headers

        Raises:
            UpstreamError: If the origin could not be reached
        """
        url = self.build_url(descriptor)
        try:
            response = await self.client.request(
                descriptor.method,
                url,
                headers=self.build_headers(descriptor),
            )
        except httpx.HTTPError as e:
            logger.error("Upstream request %s %s failed: %s", descriptor.method, url, e)
            raise UpstreamError(f"Upstream request failed: {e}") from e

        logger.debug("Upstream %s %s -> %d", descriptor.method, url, response.status_code)
        return UpstreamResult(
            status_code=response.status_code,
            body=decode_body(response),
            headers=dict(response.headers),
        )

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
