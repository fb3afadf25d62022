"""Command-line entry point.

Example::

    caching-proxy --port 3000 --origin https://dummyjson.com --ttl 120
    caching-proxy --clear-cache
"""

import dataclasses
import logging
import socket
from pathlib import Path

import typer
import uvicorn

from caching_proxy.config import get_settings
from caching_proxy.exceptions import StoreWriteError
from caching_proxy.repositories import FileCacheRepository

EXIT_SUCCESS = 0
EXIT_GENERIC_FAILURE = 1
EXIT_INVALID_USAGE = 2

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="caching-proxy",
    help="Forwarding HTTP proxy that caches origin responses.",
    add_completion=False,
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def port_in_use(host: str, port: int) -> bool:
    """Check whether the listening address is already taken."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError:
            return True
    return False


@app.command()
def main(
    port: int | None = typer.Option(None, "--port", "-p", help="Port number for the proxy server."),
    origin: str | None = typer.Option(None, "--origin", "-o", help="Origin server URL."),
    clear_cache: bool = typer.Option(False, "--clear-cache", "-c", help="Clear the entire cache and exit."),
    ttl: int | None = typer.Option(None, "--ttl", "-t", help="Cache TTL (time-to-live) in seconds.", min=0),
    cache_file: Path | None = typer.Option(None, "--cache-file", help="Location of the cache snapshot file."),
    host: str | None = typer.Option(None, "--host", help="Interface to listen on."),
) -> None:
    """Start the caching proxy, or clear its cache."""
    base = get_settings()
    overrides = {
        "api_port": port,
        "origin": origin,
        "cache_ttl": ttl,
        "cache_file_path": str(cache_file) if cache_file else None,
        "api_host": host,
    }
    try:
        app_settings = dataclasses.replace(
            base, **{k: v for k, v in overrides.items() if v is not None}
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    configure_logging(app_settings.log_level)

    if clear_cache:
        repository = FileCacheRepository(file_path=app_settings.cache_file_path, ttl=app_settings.cache_ttl)
        try:
            repository.clear()
        except StoreWriteError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=EXIT_GENERIC_FAILURE)
        typer.echo("Cache cleared successfully.")
        raise typer.Exit(code=EXIT_SUCCESS)

    if not app_settings.origin:
        typer.echo("Error: --origin is required unless --clear-cache is given.", err=True)
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    from caching_proxy.api.app import create_app

    if port_in_use(app_settings.api_host, app_settings.api_port):
        typer.echo(
            f"Port {app_settings.api_port} is already in use. Please try a different port.",
            err=True,
        )
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)

    logger.info(
        "Caching proxy server running on port %d, proxying to %s",
        app_settings.api_port,
        app_settings.origin_url,
    )
    uvicorn.run(
        create_app(app_settings),
        host=app_settings.api_host,
        port=app_settings.api_port,
        log_level=app_settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
