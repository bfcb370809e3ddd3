"""
Shared helpers for CLI commands that talk to the filesystem backend.

Every command goes through ``FilesystemClient``; these helpers open one per
command and turn a ``Failure`` into a printed error and exit code 1.
"""

import asyncio
import os
from typing import Awaitable, Callable, Optional, TypeVar

import typer

from smia.client import Failure, FailureKind, FilesystemClient, RemoteResult
from smia.config import CONFIG
from smia.models import Disk, Session

T = TypeVar("T")

# Set by the root callback on every invocation from --url.
_url_override: Optional[str] = None


def set_server_url(url: Optional[str]) -> None:
    global _url_override
    _url_override = url


def get_server_url() -> str:
    """Get the backend URL from --url, environment or default."""

    # 1. --url
    url = _url_override

    # 2. Full URL from the environment
    if not url:
        url = os.getenv("SMIA_BACKEND_URL")

    # 3. Host/port pair
    if not url:
        port = os.getenv("SMIA_PORT")
        if port:
            host = os.getenv("SMIA_HOST", "localhost")
            url = f"http://{host}:{port}"

    # 4. Default
    return (url or CONFIG.backend_url).rstrip("/")


def open_client() -> FilesystemClient:
    return FilesystemClient(base_url=get_server_url())


def fail(failure: Failure):
    """Print a remote failure and exit with code 1."""
    if failure.kind == FailureKind.TRANSPORT:
        typer.echo("❌ No se puede conectar con el backend. ¿Está en ejecución?")
    else:
        typer.echo(f"❌ {failure.message}")
    raise typer.Exit(code=1)


def unwrap(result: RemoteResult[T]) -> T:
    if not result.ok:
        fail(result)
    return result.value


def run_remote(call: Callable[[FilesystemClient], Awaitable[T]]) -> T:
    """Run ``call`` against a fresh client and return what it returns."""

    async def _run() -> T:
        async with open_client() as client:
            return await call(client)

    return asyncio.run(_run())


async def fetch_session(client: FilesystemClient) -> Session:
    """Current server-side session, or an empty session if none is active."""
    result = await client.get_session()
    if not result.ok:
        if result.kind == FailureKind.MALFORMED:
            return Session.empty()
        fail(result)

    remote = result.value.session
    if remote is None or not remote.is_logged_in:
        return Session.empty()
    return remote


async def fetch_disks(client: FilesystemClient, mounted_only: bool = False) -> list[Disk]:
    """Disk snapshot from GET /disks (or /disks/mounted)."""
    return unwrap(await client.list_disks(mounted_only=mounted_only))
