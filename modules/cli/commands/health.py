"""
Health Check Commands.

Query a running notes server's liveness and readiness probes.
"""

import asyncio

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from modules.client.client import NotesClient

app = typer.Typer(help="Health check commands")
console = Console()


def _check_details(check: dict) -> str:
    parts = []
    if "notes" in check:
        parts.append(f"{check['notes']} notes")
    if "latency_ms" in check:
        parts.append(f"{check['latency_ms']}ms")
    if "error" in check:
        parts.append(f"error: {check['error']}")
    return ", ".join(parts) or "-"


def render_readiness(data: dict) -> None:
    status = data.get("status", "unknown")
    color = "green" if status == "healthy" else "red"
    console.print(Panel(f"[{color}]{status.upper()}[/{color}]", title="Notes Server"))

    checks = data.get("checks") or {}
    if not checks:
        return

    table = Table(show_header=True)
    table.add_column("Component", style="cyan")
    table.add_column("Status")
    table.add_column("Details")
    for component, check in checks.items():
        check_status = check.get("status", "unknown")
        check_color = "green" if check_status == "healthy" else "red"
        table.add_row(
            component,
            f"[{check_color}]{check_status}[/{check_color}]",
            _check_details(check),
        )
    console.print(table)


async def _probe(ready: bool) -> tuple[int, dict]:
    async with NotesClient(frontend="cli") as client:
        return await client.health(ready=ready)


@app.command()
def status() -> None:
    """
    Readiness of a running server, including its database.

    Exits 1 when the server is unreachable or not ready.
    """
    try:
        status_code, data = asyncio.run(_probe(ready=True))
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to backend[/red]")
        console.print("[dim]Is the server running? Start with: python run.py --action server[/dim]")
        raise typer.Exit(1)

    render_readiness(data)
    if status_code != 200:
        raise typer.Exit(1)


@app.command()
def ping() -> None:
    """Liveness only: is anything answering at the configured address?"""
    try:
        status_code, _ = asyncio.run(_probe(ready=False))
    except httpx.HTTPError as e:
        console.print(f"[red]Backend is not reachable ({type(e).__name__})[/red]")
        raise typer.Exit(1)

    if status_code == 200:
        console.print("[green]Backend is reachable[/green]")
    else:
        console.print(f"[yellow]Backend responded with status {status_code}[/yellow]")
