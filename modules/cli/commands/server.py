"""
Server Commands.

Runs the notes API under uvicorn in a child process.
"""

import subprocess
import sys

import typer
from rich.console import Console

from modules.backend.core.config import get_app_config
from modules.cli.commands.db import _run_alembic

app = typer.Typer(help="Server management commands")
console = Console()

ASGI_APP = "modules.backend.main:app"


def uvicorn_command(host: str, port: int, reload: bool, log_level: str) -> list[str]:
    # SQLite allows one writer, so the server always runs a single worker
    cmd = [
        sys.executable, "-m", "uvicorn", ASGI_APP,
        "--host", host,
        "--port", str(port),
        "--log-level", log_level.lower(),
    ]
    if reload:
        cmd += ["--reload", "--reload-dir", "modules"]
    return cmd


@app.command()
def start(
    host: str = typer.Option(None, "--host", "-h", help="Server host"),
    port: int = typer.Option(None, "--port", "-p", help="Server port"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Restart on code changes"),
    migrate: bool = typer.Option(False, "--migrate", help="Upgrade the schema to head first"),
) -> None:
    """
    Serve the notes API.

    Examples:
        notes.py server start --migrate
        notes.py server start --host 0.0.0.0 --port 8080 --reload
    """
    app_config = get_app_config()
    server = app_config.application.server
    host = host or server.host
    port = port or server.port

    if migrate:
        _run_alembic("upgrade", "head")

    console.print(f"[bold]Notes API at http://{host}:{port}{app_config.application.api_prefix}[/bold]")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    cmd = uvicorn_command(host, port, reload, app_config.logging.level)
    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        console.print("\n[dim]Server stopped[/dim]")
    except subprocess.CalledProcessError as e:
        console.print(f"[red]Server exited with code {e.returncode}[/red]")
        raise typer.Exit(e.returncode)
