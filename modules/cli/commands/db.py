"""
Database Commands.

Alembic migrations for the notes and images tables, run as a subprocess
against the database named by database.yaml or DATABASE_URL.
"""

import subprocess
import sys

import typer
from rich.console import Console
from sqlalchemy.engine import make_url

from modules.backend.core.config import get_database_url, project_path

app = typer.Typer(help="Database migration commands")
console = Console()

ALEMBIC_INI = ("modules", "backend", "migrations", "alembic.ini")


def describe_database(url: str) -> str:
    """URL with the password masked, for echoing to the terminal."""
    return make_url(url).render_as_string(hide_password=True)


def _run_alembic(*args: str) -> None:
    alembic_ini = project_path(*ALEMBIC_INI)
    if not alembic_ini.exists():
        console.print(f"[red]Error: {'/'.join(ALEMBIC_INI)} not found[/red]")
        raise typer.Exit(1)

    console.print(f"[dim]Database: {describe_database(get_database_url())}[/dim]")
    cmd = [sys.executable, "-m", "alembic", "-c", str(alembic_ini), *args]

    try:
        result = subprocess.run(cmd, cwd=alembic_ini.parents[3])
    except FileNotFoundError:
        console.print("[red]Error: alembic not found. Install with: pip install alembic[/red]")
        raise typer.Exit(1)

    if result.returncode != 0:
        raise typer.Exit(result.returncode)


@app.command()
def upgrade(
    revision: str = typer.Option("head", "--revision", "-r", help="Target revision"),
) -> None:
    """
    Upgrade the schema.

    Examples:
        notes.py db upgrade
        notes.py db upgrade -r 0001
    """
    console.print(f"[bold]Upgrading database to revision: {revision}[/bold]\n")
    _run_alembic("upgrade", revision)
    console.print("\n[green]Upgrade completed[/green]")


@app.command()
def downgrade(
    revision: str = typer.Option(..., "--revision", "-r", help="Target revision"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation for base"),
) -> None:
    """
    Downgrade the schema.

    Downgrading to base drops the notes and images tables with their rows,
    so it asks first unless --yes is given.

    Examples:
        notes.py db downgrade -r base --yes
    """
    if revision == "base" and not yes:
        typer.confirm("Drop every note and image?", abort=True)

    console.print(f"[bold]Downgrading database to revision: {revision}[/bold]\n")
    _run_alembic("downgrade", revision)
    console.print("\n[green]Downgrade completed[/green]")


@app.command()
def current() -> None:
    """Show the applied revision."""
    _run_alembic("current")


@app.command()
def history() -> None:
    _run_alembic("history", "--verbose")


@app.command()
def generate(
    message: str = typer.Option(..., "--message", "-m", help="Migration message"),
) -> None:
    """
    Autogenerate a revision from the Note and Image models.

    Examples:
        notes.py db generate -m "add note icon column"
    """
    console.print(f"[bold]Generating migration: {message}[/bold]\n")
    _run_alembic("revision", "--autogenerate", "-m", message)
    console.print("\n[green]Migration generated[/green]")
