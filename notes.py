#!/usr/bin/env python3
"""
Notes CLI.

Command-line client for the notes server.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    python notes.py --help                    # Show help

    # Notes (requires a running server)
    python notes.py tree                      # Show the note tree
    python notes.py show 3                    # Print a note
    python notes.py search plan               # Find notes by name
    python notes.py create "Ideas" -p 3       # Create a note under #3
    python notes.py rename 4 "Old ideas"      # Rename a note
    python notes.py move 4 --to root          # Move a note to the root
    python notes.py delete 3 --yes            # Delete a note and its subtree
    python notes.py open 4                    # Open a note, remember it as current
    python notes.py open                      # Reopen the current note
    python notes.py image-upload plot.png     # Upload an image

    # Server and database
    python notes.py server start --reload     # Start FastAPI server
    python notes.py db upgrade                # Apply migrations
    python notes.py health status             # Backend readiness

Options:
    --verbose, -v     Enable verbose output
    --debug           Enable debug mode (detailed logging)
    --help            Show help message
"""

import sys
from pathlib import Path

import typer
from rich.console import Console

# Add project root to path for absolute imports
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from modules.cli.commands import db_app, health_app, notes_app, server_app

app = notes_app
console = Console()

app.add_typer(server_app, name="server")
app.add_typer(db_app, name="db")
app.add_typer(health_app, name="health")


def _validate_project_root() -> None:
    """Validate that we're running from the project root."""
    if not (project_root / ".project_root").exists():
        console.print("[red]Error: .project_root not found. Run from project root.[/red]")
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Notes CLI.

    Browse and edit the note tree, run the server and manage the database.
    """
    _validate_project_root()

    from modules.backend.core.logging import setup_logging

    if debug:
        setup_logging(level="DEBUG", format_type="console")
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        setup_logging(level="INFO", format_type="console")
    else:
        setup_logging(level="WARNING", format_type="console")


if __name__ == "__main__":
    app()
