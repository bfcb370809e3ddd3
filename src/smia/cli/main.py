"""
Top-level CLI commands: run, exec, login, logout, session, health.
"""

import asyncio
import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import typer

from smia.cli._http import fetch_session, get_server_url, open_client, run_remote
from smia.client import FilesystemClient
from smia.connection import ConnectionManager
from smia.orchestrator import ExecutionOutcome, ScriptOrchestrator
from smia.output_log import CommandResult
from smia.script import ScriptFileError, load_script
from smia.session.auth import Authenticator, default_partition
from smia.state import AppState

CANCELLING_MESSAGE = "⏹️ Cancelando tras el comando en curso (Ctrl+C otra vez para abortar)"


def configure_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    from smia.logger import setup_logging

    setup_logging(level="DEBUG" if verbose else None)


def print_entry(entry: CommandResult) -> None:
    """Render a committed Output Log entry on the terminal."""
    if entry.is_running:
        return
    if entry.command:
        typer.secho(f"➤ {entry.command}  [{entry.timestamp}]", bold=True)
    color = typer.colors.RED if entry.is_error else None
    typer.secho(entry.output, fg=color, err=entry.is_error)


def _new_state() -> AppState:
    state = AppState()
    state.log.subscribe(print_entry)
    return state


async def _login(
    state: AppState,
    client: FilesystemClient,
    user: Optional[str],
    password: Optional[str],
    partition_id: Optional[str],
    interactive: bool,
) -> bool:
    """Log in with the given credentials, prompting for missing ones."""
    if not user:
        if not interactive:
            return False
        user = typer.prompt("Usuario")
    if not password:
        if not interactive:
            return False
        password = typer.prompt("Contraseña", hide_input=True)

    if not partition_id:
        disks = await client.list_disks(mounted_only=True)
        partition = default_partition(disks.value) if disks.ok else None
        if partition is None:
            state.log.error("No hay particiones montadas disponibles")
            return False
        partition_id = partition.id

    result = await Authenticator(state, client).login(user, password, partition_id)
    if not result.ok:
        state.log.error(result.message or "Credenciales incorrectas", command="login")
        return False
    return True


@contextmanager
def interrupt_cancels(orchestrator: ScriptOrchestrator):
    """
    While active, Ctrl+C stops the script after the command in flight.

    The handler removes itself on first use, so a second Ctrl+C reaches the
    default handler and aborts with KeyboardInterrupt.
    """
    loop = asyncio.get_running_loop()

    def _on_interrupt():
        loop.remove_signal_handler(signal.SIGINT)
        typer.echo(CANCELLING_MESSAGE, err=True)
        orchestrator.cancel()

    try:
        loop.add_signal_handler(signal.SIGINT, _on_interrupt)
        installed = True
    except (NotImplementedError, RuntimeError):
        installed = False

    try:
        yield
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


async def _execute(orchestrator: ScriptOrchestrator, text: str) -> ExecutionOutcome:
    with interrupt_cancels(orchestrator):
        return await orchestrator.execute(text)


async def _run_script(
    text: str,
    user: Optional[str],
    password: Optional[str],
    partition_id: Optional[str],
    interactive: bool,
) -> tuple[ExecutionOutcome, AppState]:
    state = _new_state()
    async with open_client() as client:
        if not await ConnectionManager(state, client).connect():
            return ExecutionOutcome.DISCONNECTED, state

        orchestrator = ScriptOrchestrator(state, client)
        outcome = await _execute(orchestrator, text)
        if outcome == ExecutionOutcome.AUTH_REQUIRED:
            # Prompts run with the default Ctrl+C behaviour.
            if await _login(state, client, user, password, partition_id, interactive):
                outcome = await _execute(orchestrator, text)
        return outcome, state


def _exit_for(outcome: ExecutionOutcome, state: AppState) -> None:
    if outcome != ExecutionOutcome.COMPLETED:
        raise typer.Exit(code=1)
    # Only command results count; status messages carry no command.
    if any(entry.is_error and entry.command for entry in state.log):
        raise typer.Exit(code=1)


def register_commands(app: typer.Typer):
    """Register top-level commands onto the app."""

    @app.command()
    def run(
        script: Path = typer.Argument(..., help="Path to a .smia script"),
        user: Optional[str] = typer.Option(
            None, "--user", "-u", help="User to log in as if the script needs it"
        ),
        password: Optional[str] = typer.Option(
            None, "--password", "-p", help="Password for --user"
        ),
        partition_id: Optional[str] = typer.Option(
            None, "--id", help="Partition to log in to (default: first mounted)"
        ),
    ):
        """Execute a .smia script against the backend, in order."""
        try:
            text = load_script(script)
        except ScriptFileError as e:
            typer.echo(f"❌ {e}")
            raise typer.Exit(code=1)

        typer.echo(f'✅ Archivo "{script.name}" cargado exitosamente')
        outcome, state = asyncio.run(
            _run_script(text, user, password, partition_id, sys.stdin.isatty())
        )
        _exit_for(outcome, state)

    @app.command("exec")
    def exec_command(
        line: str = typer.Argument(..., help="A single command line"),
    ):
        """Execute a single command line."""
        outcome, state = asyncio.run(_run_script(line, None, None, None, False))
        _exit_for(outcome, state)

    @app.command()
    def login(
        user: str = typer.Option(..., "--user", "-u", help="Username"),
        password: str = typer.Option(
            ..., "--password", "-p", prompt="Contraseña", hide_input=True
        ),
        partition_id: Optional[str] = typer.Option(
            None, "--id", help="Partition id (default: first mounted)"
        ),
    ):
        """Log in to a mounted partition."""

        async def _do() -> bool:
            state = _new_state()
            async with open_client() as client:
                if not await ConnectionManager(state, client).connect():
                    return False
                if state.session.is_logged_in:
                    state.log.info("ℹ️ Ya hay una sesión activa", command="login")
                    return True
                return await _login(state, client, user, password, partition_id, False)

        if not asyncio.run(_do()):
            raise typer.Exit(code=1)

    @app.command()
    def logout():
        """Close the active session."""

        async def _do() -> bool:
            state = _new_state()
            async with open_client() as client:
                if not await ConnectionManager(state, client).connect():
                    return False
                if not state.session.is_logged_in:
                    typer.echo("No hay una sesión activa.")
                    return True
                return await Authenticator(state, client).logout()

        if not asyncio.run(_do()):
            raise typer.Exit(code=1)

    @app.command()
    def session():
        """Show the server-side session."""
        current = run_remote(fetch_session)
        if not current.is_logged_in:
            typer.echo("Sin sesión activa.")
            return

        icon = "🔑" if current.is_root else "👤"
        typer.echo(f"{icon} {current.username}")
        typer.echo(f"📁 {current.partition_id}")

    @app.command()
    def health():
        """Check that the backend is reachable."""
        if not run_remote(lambda client: client.health()):
            typer.echo(f"🔴 Backend no disponible en {get_server_url()}")
            raise typer.Exit(code=1)
        typer.echo(f"🟢 Conectado a {get_server_url()}")
