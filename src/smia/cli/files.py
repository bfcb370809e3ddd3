"""
CLI subcommands for browsing partition contents.

Usage:
    smia files ls <partition> [path]
    smia files cat <partition> <path>
"""

import typer

from smia.access import find_partition, has_access
from smia.cli._http import fetch_disks, fetch_session, run_remote, unwrap
from smia.client import FilesystemClient

files_app = typer.Typer(help="Browse files on a partition")


async def _require_access(client: FilesystemClient, partition_id: str) -> None:
    """Exit unless the current session may browse ``partition_id`` right now."""
    session = await fetch_session(client)
    partition = find_partition(await fetch_disks(client), partition_id)

    if partition is None:
        typer.echo(f"❌ Partición '{partition_id}' no encontrada")
        raise typer.Exit(code=1)

    if not has_access(session, partition):
        if not partition.is_mounted:
            typer.echo(f"❌ La partición '{partition_id}' no está montada")
        else:
            typer.echo(f"🔒 Acceso denegado a la partición '{partition_id}'")
        raise typer.Exit(code=1)


@files_app.command("ls")
def files_ls(
    partition_id: str = typer.Argument(help="Partition id"),
    path: str = typer.Argument("/", help="Directory path"),
):
    """List a directory on a partition."""

    async def _list(client: FilesystemClient):
        await _require_access(client, partition_id)
        return await client.list_files(partition_id, path)

    files = unwrap(run_remote(_list))

    if not files:
        typer.echo("📂 Carpeta vacía")
        return

    typer.echo(f"📂 {partition_id}:{path}\n")
    for node in files:
        icon = "📁" if node.is_folder else "📄"
        typer.echo(
            f"  {icon} {node.name:<24} {node.permissions:<5} "
            f"{node.owner}:{node.group} {node.size}"
        )


@files_app.command("cat")
def files_cat(
    partition_id: str = typer.Argument(help="Partition id"),
    path: str = typer.Argument(help="File path"),
):
    """Print the content of a file."""

    async def _read(client: FilesystemClient):
        await _require_access(client, partition_id)
        return await client.read_file(partition_id, path)

    typer.echo(unwrap(run_remote(_read)))
