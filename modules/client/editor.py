"""
Editor session.

Keeps at most one note open in an editor and coordinates open, save,
delete and move against the notes API. State lives in an EditorState
object owned by the caller, so several sessions can run side by side.

No method raises on API or network failures: the failure is logged
and the method returns None or False, meaning the operation did not
happen.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import httpx

from modules.backend.core.logging import get_logger, log_with_source
from modules.backend.schemas.image import ImageSummary
from modules.backend.schemas.note import NoteResponse
from modules.client.client import ApiError, NotesClient

logger = get_logger(__name__)

CLIENT_ERRORS = (ApiError, httpx.HTTPError)


class Editor(Protocol):
    """The rich-text widget, seen only through its serialized HTML."""

    def get_html(self) -> str: ...

    def set_content(self, html: str) -> None: ...


class TextBufferEditor:
    """Editor that holds the HTML as a plain string."""

    def __init__(self, html: str = "") -> None:
        self._html = html

    def get_html(self) -> str:
        return self._html

    def set_content(self, html: str) -> None:
        self._html = html


@dataclass
class EditorState:
    """What the UI is showing: the editor, the open note, and whether the tree needs a reload."""

    editor: Editor
    note: NoteResponse | None = None
    tree_is_stale: bool = True

    @property
    def is_open(self) -> bool:
        return self.note is not None


class NoteCache(Protocol):
    """Where the id of the open note is remembered between runs."""

    def load(self) -> int | None: ...

    def store(self, note_id: int) -> None: ...

    def clear(self) -> None: ...


class MemoryNoteCache:
    def __init__(self) -> None:
        self._note_id: int | None = None

    def load(self) -> int | None:
        return self._note_id

    def store(self, note_id: int) -> None:
        self._note_id = note_id

    def clear(self) -> None:
        self._note_id = None


class JsonFileNoteCache:
    """
    Current-note pointer stored as {"noteId": <id>} in a small JSON file.

    A missing or unreadable file reads as "no note".
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> int | None:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        note_id = raw.get("noteId") if isinstance(raw, dict) else None
        return note_id if isinstance(note_id, int) else None

    def store(self, note_id: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"noteId": note_id}), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class EditorSession:
    """
    Open/save/delete/move for the note shown in an editor.

    States are Idle (state.note is None) and Open (state.note is set).
    """

    def __init__(
        self,
        client: NotesClient,
        state: EditorState,
        cache: NoteCache | None = None,
    ) -> None:
        self.client = client
        self.state = state
        self.cache = cache or MemoryNoteCache()

    def _log_failure(self, message: str, error: Exception, **kwargs: object) -> None:
        log_with_source(
            logger,
            "client",
            "warning",
            message,
            error=str(error),
            error_type=type(error).__name__,
            **kwargs,
        )

    async def open_note(self, note_id: int) -> NoteResponse | None:
        """
        Open a note in the editor.

        The currently open note is saved first; if that save fails the
        new note is opened anyway. If the target cannot be fetched the
        session stays as it was and None is returned.
        """
        if self.state.is_open:
            await self.save_note()

        try:
            note = await self.client.get_note(note_id)
        except CLIENT_ERRORS as e:
            self._log_failure("Failed to open note", e, note_id=note_id)
            return None

        if note is None:
            log_with_source(logger, "client", "warning", "Note not found", note_id=note_id)
            return None

        self.state.editor.set_content(note.content)
        self.state.note = note
        self.cache.store(note.id)
        return note

    async def save_note(self) -> NoteResponse | None:
        """Write the editor's content back to the open note. No-op when idle."""
        note = self.state.note
        if note is None:
            return None

        try:
            saved = await self.client.update_note(note.id, note.name, self.state.editor.get_html())
        except CLIENT_ERRORS as e:
            self._log_failure("Failed to save note", e, note_id=note.id)
            return None

        self.state.note = saved
        return saved

    async def remove_note(self, note_id: int) -> bool:
        """
        Delete a note and its subtree.

        If it was the open note, the editor is cleared, the session goes
        idle and the cached pointer is dropped.
        """
        try:
            await self.client.delete_note(note_id)
        except CLIENT_ERRORS as e:
            self._log_failure("Failed to delete note", e, note_id=note_id)
            return False

        if self.state.note is not None and self.state.note.id == note_id:
            self.state.editor.set_content("")
            self.state.note = None
            self.cache.clear()

        self.state.tree_is_stale = True
        return True

    async def move_note(self, note_id: int, new_parent_id: int | None) -> NoteResponse | None:
        """
        Drop a note onto a new parent (None for the root).

        Dropping a note on itself or inside its own subtree is refused
        here, before the server is asked.
        """
        if new_parent_id is not None:
            if new_parent_id == note_id:
                return None
            try:
                ancestry = await self.client.get_note_path(new_parent_id)
            except CLIENT_ERRORS as e:
                self._log_failure("Failed to check drop target", e, note_id=note_id)
                return None
            if any(entry.id == note_id for entry in ancestry):
                log_with_source(
                    logger,
                    "client",
                    "info",
                    "Refused to move a note into its own subtree",
                    note_id=note_id,
                    new_parent_id=new_parent_id,
                )
                return None

        try:
            moved = await self.client.move_note(note_id, new_parent_id)
        except CLIENT_ERRORS as e:
            self._log_failure("Failed to move note", e, note_id=note_id)
            return None

        if self.state.note is not None and self.state.note.id == moved.id:
            self.state.note = self.state.note.model_copy(update={"parent_id": moved.parent_id})
        self.state.tree_is_stale = True
        return moved

    async def create_note(self, name: str, parent_id: int | None = None) -> NoteResponse | None:
        try:
            note = await self.client.create_note(name, parent_id=parent_id)
        except CLIENT_ERRORS as e:
            self._log_failure("Failed to create note", e, parent_id=parent_id)
            return None
        self.state.tree_is_stale = True
        return note

    async def rename_note(self, note_id: int, name: str) -> NoteResponse | None:
        """Rename a note, keeping the open note's title in sync."""
        try:
            renamed = await self.client.rename_note(note_id, name)
        except CLIENT_ERRORS as e:
            self._log_failure("Failed to rename note", e, note_id=note_id)
            return None

        if self.state.note is not None and self.state.note.id == note_id:
            self.state.note = self.state.note.model_copy(update={"name": renamed.name})
        self.state.tree_is_stale = True
        return renamed

    async def restore(self) -> NoteResponse | None:
        """Reopen the note remembered in the cache, forgetting it if it cannot be opened."""
        note_id = self.cache.load()
        if note_id is None:
            return None

        note = await self.open_note(note_id)
        if note is None:
            self.cache.clear()
        return note

    async def upload_image(
        self,
        filename: str,
        data: bytes | str,
        mimetype: str | None = None,
    ) -> ImageSummary | None:
        try:
            return await self.client.upload_image(filename, data, mimetype)
        except CLIENT_ERRORS as e:
            self._log_failure("Failed to upload image", e, filename=filename)
            return None
