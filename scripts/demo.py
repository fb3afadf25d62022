#!/usr/bin/env python3
"""
Demo script for the caching proxy.

Runs the resolution pipeline against an in-process fake origin, so no
network access or running server is needed.
"""

import asyncio
import tempfile
import time
from pathlib import Path

import httpx

from caching_proxy.entities import RequestDescriptor
from caching_proxy.repositories import FileCacheRepository, HttpxForwarder
from caching_proxy.services import ProxyService


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def fake_origin(request: httpx.Request) -> httpx.Response:
    """Slow origin that returns a product document for any path."""
    time.sleep(0.2)
    if request.url.path == "/broken":
        return httpx.Response(503, json={"message": "maintenance"})
    return httpx.Response(200, json={"path": request.url.path, "served_at": time.time()})


def build_service(cache_file: Path, forwarder: HttpxForwarder) -> ProxyService:
    return ProxyService.create(
        repository=FileCacheRepository.create(file_path=cache_file, ttl=60),
        forwarder=forwarder,
        ttl=60,
    )


async def demo_hit_and_miss(cache_file: Path) -> None:
    """Demonstrate MISS then HIT for the same request."""
    print_section("Hit and Miss")

    forwarder = HttpxForwarder(origin="https://origin.example", transport=httpx.MockTransport(fake_origin))
    service = build_service(cache_file, forwarder)

    request = RequestDescriptor("GET", "/products/1", {"accept": "application/json"})
    for attempt in range(3):
        start = time.perf_counter()
        resolution = await service.resolve(request)
        duration = (time.perf_counter() - start) * 1000
        print(f"  #{attempt + 1} X-Cache: {resolution.cache_status.value:<4} {duration:7.2f}ms  {resolution.payload}")

    print("\n🔑 Headers are part of the key:")
    other_client = RequestDescriptor("GET", "/products/1", {"accept": "application/json", "user-agent": "demo"})
    resolution = await service.resolve(other_client)
    print(f"  Same path, extra header -> {resolution.cache_status.value}")

    print("\n❗ Upstream failure:")
    resolution = await service.resolve(RequestDescriptor("GET", "/broken"))
    print(f"  status={resolution.status_code} error={resolution.error}")

    print(f"\n📊 Stats: {service.get_stats()['metrics']}")
    await forwarder.close()


async def demo_restart(cache_file: Path) -> None:
    """Demonstrate that the snapshot survives a restart."""
    print_section("Persistence Across Restart")

    print(f"\n💾 Snapshot file: {cache_file} ({cache_file.stat().st_size} bytes)")

    forwarder = HttpxForwarder(origin="https://origin.example", transport=httpx.MockTransport(fake_origin))
    service = build_service(cache_file, forwarder)

    resolution = await service.resolve(RequestDescriptor("GET", "/products/1", {"accept": "application/json"}))
    print(f"  After restart: X-Cache: {resolution.cache_status.value}")

    print("\n🧹 Clearing cache...")
    service.clear()
    print(f"  Snapshot exists: {cache_file.exists()}")
    await forwarder.close()


def main() -> None:
    """Run all demos."""
    print("\n🚀 Caching Proxy Demo")
    print("=" * 70)

    with tempfile.TemporaryDirectory() as tmp:
        cache_file = Path(tmp) / "cache.json"
        asyncio.run(demo_hit_and_miss(cache_file))
        asyncio.run(demo_restart(cache_file))

    print("\n" + "=" * 70)
    print("✅ Demo completed successfully!")
    print("=" * 70)


if __name__ == "__main__":
    main()
