"""
Shared fixtures for the caching proxy tests.
"""

import pytest

from caching_proxy.config import Settings
from caching_proxy.entities import RequestDescriptor, UpstreamResult
from caching_proxy.repositories import FileCacheRepository


class FakeClock:
    """Manually advanced clock returning Unix timestamps."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingForward:
    """Forward callback that replays canned upstream results and records calls."""

    def __init__(self, *results: UpstreamResult | Exception) -> None:
        self._results = list(results)
        self.calls: list[RequestDescriptor] = []

    async def __call__(self, descriptor: RequestDescriptor) -> UpstreamResult:
        self.calls.append(descriptor)
        result = self._results.pop(0) if len(self._results) > 1 else self._results[0]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def clock():
    """A fake clock starting at a fixed timestamp."""
    return FakeClock()


@pytest.fixture
def cache_file(tmp_path):
    """Snapshot location inside the test's temporary directory."""
    return tmp_path / "cache.json"


@pytest.fixture
def repository(cache_file, clock):
    """An empty repository with a 60 second default TTL."""
    return FileCacheRepository(file_path=cache_file, ttl=60, clock=clock)


@pytest.fixture
def app_settings(cache_file):
    """Settings pointing at a fake origin and a temporary snapshot."""
    return Settings(
        origin="https://api.example.com",
        cache_ttl=60,
        cache_file_path=str(cache_file),
        cache_key_headers=(),
        upstream_timeout=5.0,
    )


@pytest.fixture
def make_forward():
    """Factory for RecordingForward callbacks."""
    return RecordingForward
