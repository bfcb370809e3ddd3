"""
CLI subcommands for inspecting disks and partitions.

Usage:
    smia disks list [--mounted]
    smia disks partitions
"""

import typer

from smia.access import accessible_partitions
from smia.cli._http import fetch_disks, fetch_session, run_remote
from smia.client import FilesystemClient

disks_app = typer.Typer(help="Inspect disks and partitions")


def _format_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


@disks_app.command("list")
def disks_list(
    mounted: bool = typer.Option(
        False, "--mounted", "-m", help="Only disks with mounted partitions"
    ),
):
    """List disks and their partition tables."""
    disks = run_remote(lambda client: fetch_disks(client, mounted_only=mounted))

    if not disks:
        typer.echo("No hay discos disponibles.")
        return

    typer.echo(f"💽 Discos ({len(disks)}):\n")
    for disk in disks:
        mounted_count = sum(1 for p in disk.partitions if p.is_mounted)
        typer.echo(f"  {disk.path}")
        typer.echo(f"     Tamaño: {disk.size} {disk.unit}  Ajuste: {disk.fit}")
        typer.echo(f"     Particiones: {len(disk.partitions)} ({mounted_count} montada(s))")
        for partition in disk.partitions:
            icon = "🟢" if partition.is_mounted else "⚪"
            ident = f" [{partition.id}]" if partition.id else ""
            typer.echo(
                f"       {icon} {partition.name}{ident} "
                f"{partition.type} {_format_size(partition.size)}"
            )
        typer.echo("")


@disks_app.command("partitions")
def disks_partitions():
    """Show which partitions the current session may browse."""

    async def _snapshot(client: FilesystemClient):
        return await fetch_session(client), await fetch_disks(client)

    session, disks = run_remote(_snapshot)
    accessible = accessible_partitions(session, disks)

    who = session.label if session.is_logged_in else "sin sesión"
    typer.echo(f"👤 {who}\n")

    for disk in disks:
        for partition in disk.partitions:
            icon = "🔓" if partition in accessible else "🔒"
            current = " (actual)" if partition.id and partition.id == session.partition_id else ""
            state = "montada" if partition.is_mounted else "desmontada"
            typer.echo(f"  {icon} {partition.name} [{partition.id or '-'}] {state}{current}")

    typer.echo(f"\n{len(accessible)} partición(es) accesible(s)")
