"""
CLI subcommands for the partition journal.

Usage:
    smia journal show <partition> [--filter TEXT]
    smia journal repair <partition>
    smia journal dump <partition>
"""

import typer

from smia.cli._http import run_remote, unwrap
from smia.journal import filter_entries, normalize, operation_kind

journal_app = typer.Typer(help="Inspect the journaling of a partition")

_KIND_ICONS = {
    "create": "📝",
    "delete": "🗑️",
    "edit": "✏️",
    "rename": "📛",
    "move": "📦",
    "copy": "📋",
}


def _require_partition(partition_id: str) -> None:
    if not partition_id.strip():
        typer.echo("❌ Selecciona una partición montada")
        raise typer.Exit(code=1)


@journal_app.command("show")
def journal_show(
    partition_id: str = typer.Argument(help="Partition id"),
    query: str = typer.Option(
        "", "--filter", "-f", help="Filter by operation or path"
    ),
):
    """List the journal entries of a partition."""
    _require_partition(partition_id)

    raw = unwrap(run_remote(lambda client: client.journaling(partition_id)))
    entries = normalize(raw)
    shown = filter_entries(entries, query)

    typer.echo(f"📜 Journaling de {partition_id}: {len(entries)} entrada(s)")
    if query:
        typer.echo(f"🔍 Filtradas: {len(shown)} de {len(entries)}")
    typer.echo("")

    for entry in shown:
        icon = _KIND_ICONS.get(operation_kind(entry.operation), "📄")
        typer.echo(f"  {icon} {entry.operation:<10} {entry.path}")
        typer.echo(f"     {entry.timestamp}  {entry.user}  {entry.permissions}")
        typer.echo(f"     {entry.content}")


@journal_app.command("repair")
def journal_repair(
    partition_id: str = typer.Argument(help="Partition id"),
):
    """Recover journal entries written by older layouts."""
    _require_partition(partition_id)

    recovered = unwrap(run_remote(lambda client: client.repair_journal(partition_id)))
    typer.echo(f"🔧 Entradas recuperadas: {recovered}")


@journal_app.command("dump")
def journal_dump(
    partition_id: str = typer.Argument(help="Partition id"),
):
    """Print the raw journal regions (base64) for diagnostics."""
    _require_partition(partition_id)

    dump = unwrap(run_remote(lambda client: client.dump_journal(partition_id)))
    typer.echo(f"candidate1: {dump.candidate1 or '(vacío)'}")
    typer.echo(f"preferred:  {dump.preferred or '(vacío)'}")
