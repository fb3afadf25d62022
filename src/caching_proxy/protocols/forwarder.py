"""Upstream forwarder protocol.

Defines the interface for the collaborator that performs the outbound call
to the origin. Retry policy, if any, belongs to implementations of this
protocol; the resolver never retries.
"""

from typing import Protocol, runtime_checkable

from caching_proxy.entities import RequestDescriptor, UpstreamResult


@runtime_checkable
class Forwarder(Protocol):
    """Protocol for upstream HTTP clients."""

    @property
    def origin(self) -> str:
        """Base URL requests are forwarded to."""
        ...

    async def forward(self, descriptor: RequestDescriptor) -> UpstreamResult:
        """Send the request to the origin.

        Args:
            descriptor: The request to replay against the origin

        Returns:
            The origin's response, whatever its status

        Raises:
            UpstreamError: If no response could be obtained
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
