"""Request descriptor domain entity."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

# Validators that let the origin answer 304 instead of a full representation
CONDITIONAL_HEADERS = frozenset(
    {
        "if-none-match",
        "if-modified-since",
        "if-match",
        "if-unmodified-since",
        "if-range",
    }
)


@dataclass(frozen=True)
class RequestDescriptor:
    """Identity of an inbound request, captured once and never mutated.

    Attributes:
        method: HTTP method (e.g., "GET")
        target: Path plus query string as received (e.g., "/x?page=2")
        headers: Header name to value(s), in the order they were received
    """

    method: str
    target: str
    headers: Mapping[str, str | list[str]] = field(default_factory=dict)

    @classmethod
    def from_pairs(
        cls,
        method: str,
        target: str,
        header_pairs: list[tuple[str, str]],
    ) -> "RequestDescriptor":
        """Build a descriptor from raw header pairs.

        Names are lower-cased and repeated headers are joined with ", ",
        keeping the position of their first occurrence.
        """
        headers: dict[str, str] = {}
        for name, value in header_pairs:
            name = name.lower()
            if name in headers:
                headers[name] = f"{headers[name]}, {value}"
            else:
                headers[name] = value
        return cls(method=method.upper(), target=target, headers=headers)

    def without_headers(self, names: frozenset[str] | set[str]) -> "RequestDescriptor":
        """Return a copy without the given (lower-case) header names."""
        return replace(
            self,
            headers={k: v for k, v in self.headers.items() if k.lower() not in names},
        )

    def without_conditional_headers(self) -> "RequestDescriptor":
        """Return a copy that asks the origin for a full representation."""
        return self.without_headers(CONDITIONAL_HEADERS)

    def with_header(self, name: str, value: str) -> "RequestDescriptor":
        """Return a copy with one header set (replacing any existing value)."""
        headers = {k: v for k, v in self.headers.items() if k.lower() != name.lower()}
        headers[name.lower()] = value
        return replace(self, headers=headers)
