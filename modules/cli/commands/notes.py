"""
Note Commands.

Browse and edit the note hierarchy of a running server.
"""

import asyncio
from collections.abc import Awaitable
from pathlib import Path
from typing import Any, Optional, TypeVar

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from modules.backend.core.config import get_client_state_path
from modules.client.client import ApiError, NotesClient
from modules.client.editor import (
    EditorSession,
    EditorState,
    JsonFileNoteCache,
    TextBufferEditor,
)
from modules.client.tree import TreeNode, build_explorer_tree

app = typer.Typer(
    name="notes",
    help="Notes CLI - browse and edit the note tree of a running server.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()

T = TypeVar("T")


def get_client() -> NotesClient:
    """Client for the server configured in application.yaml."""
    return NotesClient(frontend="cli")


def get_note_cache() -> JsonFileNoteCache:
    """Current-note pointer shared by `open` and `delete` across invocations."""
    return JsonFileNoteCache(get_client_state_path())


def _run(coro: Awaitable[T]) -> T:
    """Run a command coroutine, turning API failures into exit code 1."""
    try:
        return asyncio.run(coro)
    except ApiError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to backend[/red]")
        console.print("[dim]Is the server running? Start with: python run.py --action server[/dim]")
        raise typer.Exit(1)


def _parse_parent(value: Optional[str]) -> int | None:
    if value is None or value.lower() in ("root", "null"):
        return None
    try:
        return int(value)
    except ValueError:
        raise typer.BadParameter(f"expected a note id or 'root', got {value!r}")


def _add_branch(branch: Tree, node: TreeNode, open_id: int | None) -> None:
    marker = " [green]*[/green]" if node.id == open_id else ""
    label = f"[bold]{node.name}[/bold]" if node.is_parent else node.name
    child = branch.add(f"{label} [dim]#{node.id}[/dim]{marker}")
    for sub in node.children:
        _add_branch(child, sub, open_id)


@app.command()
def tree() -> None:
    """
    Show all notes as a tree.

    Notes with children are listed before leaves; the open note is marked with *.
    """

    async def _tree() -> list[TreeNode]:
        async with get_client() as client:
            return build_explorer_tree(await client.list_notes())

    roots = _run(_tree())
    if not roots:
        console.print("[dim]No notes yet. Create one with: notes.py create NAME[/dim]")
        return

    open_id = get_note_cache().load()
    view = Tree("[cyan]Notes[/cyan]")
    for node in roots:
        _add_branch(view, node, open_id)
    console.print(view)


@app.command()
def show(note_id: int = typer.Argument(..., help="Note id")) -> None:
    """Print a note's content with its location in the tree."""

    async def _show() -> tuple[Any, list[Any]]:
        async with get_client() as client:
            note = await client.get_note(note_id)
            if note is None:
                return None, []
            return note, await client.get_note_path(note_id)

    note, path = _run(_show())
    if note is None:
        console.print(f"[red]Error: note {note_id} not found[/red]")
        raise typer.Exit(1)

    breadcrumb = " / ".join(entry.name for entry in path)
    console.print(Panel(note.content or "[dim](empty)[/dim]", title=breadcrumb or note.name))


@app.command()
def search(text: str = typer.Argument(..., help="Text to look for in note names")) -> None:
    """Find notes whose name contains TEXT."""

    async def _search() -> list[Any]:
        async with get_client() as client:
            return await client.search_notes(text)

    notes = _run(_search())
    if not notes:
        console.print("[dim]No matching notes[/dim]")
        return

    table = Table(title=f"Notes matching {text!r}", show_header=True)
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name")
    table.add_column("Parent", justify="right")
    for note in notes:
        parent = "-" if note.parent_id is None else str(note.parent_id)
        table.add_row(str(note.id), note.name, parent)
    console.print(table)


@app.command()
def create(
    name: str = typer.Argument(..., help="Note name"),
    parent: Optional[str] = typer.Option(None, "--parent", "-p", help="Parent note id"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Initial HTML content"),
) -> None:
    """Create a note, optionally under a parent."""
    parent_id = _parse_parent(parent)

    async def _create() -> Any:
        async with get_client() as client:
            return await client.create_note(name, parent_id=parent_id, content=content)

    note = _run(_create())
    console.print(f"[green]Created note #{note.id}[/green] {note.name}")


@app.command()
def rename(
    note_id: int = typer.Argument(..., help="Note id"),
    name: str = typer.Argument(..., help="New name"),
) -> None:
    """Rename a note, keeping its content."""

    async def _rename() -> Any:
        async with get_client() as client:
            return await client.rename_note(note_id, name)

    note = _run(_rename())
    console.print(f"[green]Renamed note #{note.id}[/green] to {note.name}")


@app.command()
def move(
    note_id: int = typer.Argument(..., help="Note id"),
    to: str = typer.Option(..., "--to", "-t", help="New parent id, or 'root'"),
) -> None:
    """Move a note under another note, or to the root."""
    new_parent_id = _parse_parent(to)

    async def _move() -> Any:
        async with get_client() as client:
            session = EditorSession(client, EditorState(TextBufferEditor()), get_note_cache())
            return await session.move_note(note_id, new_parent_id)

    moved = _run(_move())
    if moved is None:
        console.print("[red]Error: move refused, a note cannot go inside its own subtree[/red]")
        raise typer.Exit(1)
    target = "the root" if moved.parent_id is None else f"#{moved.parent_id}"
    console.print(f"[green]Moved note #{moved.id}[/green] under {target}")


@app.command()
def delete(
    note_id: int = typer.Argument(..., help="Note id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a note together with everything below it."""
    if not yes:
        typer.confirm(f"Delete note #{note_id} and all of its descendants?", abort=True)

    cache = get_note_cache()

    async def _delete() -> bool:
        async with get_client() as client:
            state = EditorState(TextBufferEditor())
            open_id = cache.load()
            if open_id is not None:
                state.note = await client.get_note(open_id)
            session = EditorSession(client, state, cache)
            return await session.remove_note(note_id)

    if not _run(_delete()):
        console.print(f"[red]Error: could not delete note #{note_id}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted note #{note_id}[/green]")


@app.command(name="open")
def open_note(
    note_id: Optional[int] = typer.Argument(None, help="Note id; omit to reopen the last note"),
) -> None:
    """Open a note and remember it as the current note."""

    async def _open() -> Any:
        async with get_client() as client:
            session = EditorSession(client, EditorState(TextBufferEditor()), get_note_cache())
            if note_id is None:
                return await session.restore()
            return await session.open_note(note_id)

    note = _run(_open())
    if note is None:
        console.print("[red]Error: no note to open[/red]")
        raise typer.Exit(1)
    console.print(Panel(note.content or "[dim](empty)[/dim]", title=f"#{note.id} {note.name}"))


@app.command(name="image-upload")
def image_upload(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image file"),
) -> None:
    """Upload an image and print the URL to embed it with."""

    async def _upload() -> tuple[Any, str]:
        async with get_client() as client:
            image = await client.upload_image_file(path)
            return image, f"{client.base_url}{client.api_prefix}/images/{image.id}/raw"

    image, url = _run(_upload())
    console.print(f"[green]Uploaded {image.filename}[/green] ({image.mimetype})")
    console.print(url)
