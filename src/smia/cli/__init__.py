"""
SMIA CLI: run filesystem scripts and browse the ExtreamFS backend.

This package splits CLI commands into focused modules:
- main:    run, exec, login, logout, session, health
- disks:   list, partitions
- files:   ls, cat
- journal: show, repair, dump
"""

from typing import Optional

import typer

from smia.cli._http import set_server_url
from smia.cli.disks import disks_app
from smia.cli.files import files_app
from smia.cli.journal import journal_app
from smia.cli.main import configure_logging, register_commands

app = typer.Typer(help="SMIA CLI - script runner for the ExtreamFS backend")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging (DEBUG level)"
    ),
    url: Optional[str] = typer.Option(
        None, "--url", help="Backend URL (overrides SMIA_BACKEND_URL)"
    ),
):
    """
    SMIA CLI - script runner for the ExtreamFS backend.
    """
    configure_logging(verbose)
    set_server_url(url)


# Register top-level commands (run, exec, login, logout, session, health)
register_commands(app)

# Attach subcommand groups
app.add_typer(disks_app, name="disks")
app.add_typer(files_app, name="files")
app.add_typer(journal_app, name="journal")

if __name__ == "__main__":
    app()
