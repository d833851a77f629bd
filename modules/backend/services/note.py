"""
Note Service.

Hierarchy operations over the note store: list, lookup, children,
search, create, update, cascade delete and cycle-checked move.

All reads and writes of one call go through the same session, so a
call is a single unit of work: the session owner commits it or rolls
it back as a whole.

Known limitation: the ancestor walk in move_note and the re-parenting
update share a transaction but take no row locks. Two concurrent moves
on a database with weaker isolation than SQLite's single writer could
interleave and create a cycle. Single-user deployments are assumed.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.config import get_app_config
from modules.backend.core.config_schema import NotesSchema
from modules.backend.core.exceptions import CycleError
from modules.backend.models.note import Note
from modules.backend.repositories.note import NoteRepository
from modules.backend.schemas.note import NoteCreate, NoteUpdate
from modules.backend.services.base import BaseService


class NoteService(BaseService):
    """
    Service for note hierarchy business logic.

    Invariants maintained here:
    - the parent_id graph never gains a cycle through move_note
    - delete_note removes a note together with every transitive descendant
    """

    def __init__(
        self,
        session: AsyncSession,
        notes_config: NotesSchema | None = None,
    ) -> None:
        super().__init__(session)
        self.repo = NoteRepository(session)
        self._config = notes_config or get_app_config().application.notes

    async def list_notes(self) -> list[Note]:
        """Return every note. Order carries no meaning."""
        return await self.repo.get_all()

    async def get_note(self, note_id: int) -> Note:
        """
        Get a note by ID.

        Raises:
            NotFoundError: If note not found
        """
        return await self.repo.get_by_id(note_id)

    async def get_children(self, parent_id: int | None = None) -> list[Note]:
        """Return direct children of parent_id, or root notes when None."""
        self._log_debug("Listing children", parent_id=parent_id)
        return await self.repo.get_children(parent_id)

    async def search_notes(self, text: str) -> list[Note]:
        """Return notes whose name contains text."""
        self._log_debug("Searching notes", query=text)
        return await self.repo.search_by_name(text)

    async def create_note(self, data: NoteCreate) -> Note:
        """
        Create a new note.

        The parent is not checked for existence; a dangling parent_id
        makes the note an orphan, which clients display as a root.

        Raises:
            ValidationError: If name is blank or too long
        """
        self._require_text(data.name, "name", max_length=self._config.max_name_length)
        content = data.content if data.content is not None else self._config.default_content

        self._log_mutation("Creating note", name=data.name, parent_id=data.parent_id)

        note = await self._execute_db_operation(
            "create_note",
            self.repo.create(
                name=data.name,
                parent_id=data.parent_id,
                content=content,
            ),
        )

        self._log_debug("Note created", note_id=note.id)
        return note

    async def update_note(self, note_id: int, data: NoteUpdate) -> Note:
        """
        Replace a note's name and content.

        Raises:
            NotFoundError: If note not found
            ValidationError: If name is blank or too long
        """
        self._require_text(data.name, "name", max_length=self._config.max_name_length)

        self._log_mutation("Updating note", note_id=note_id)

        return await self._execute_db_operation(
            "update_note",
            self.repo.update(note_id, name=data.name, content=data.content),
        )

    async def delete_note(self, note_id: int) -> Note:
        """
        Delete a note and all of its descendants.

        Descendant ids are collected with one recursive query and the whole
        subtree is removed by one DELETE statement, so the store never holds
        a partially cascaded subtree.

        Returns:
            The deleted note as it was before deletion

        Raises:
            NotFoundError: If note not found
            StoreError: If the store fails; nothing is removed
        """
        note = await self.repo.get_by_id(note_id)
        self.session.expunge(note)

        self._log_mutation("Deleting note subtree", note_id=note_id)

        removed = await self._execute_db_operation(
            "delete_note",
            self._delete_subtree(note_id),
        )

        self._log_debug("Note subtree deleted", note_id=note_id, removed=removed)
        return note

    async def _delete_subtree(self, note_id: int) -> int:
        descendant_ids = await self.repo.get_descendant_ids(note_id)
        return await self.repo.delete_many([*descendant_ids, note_id])

    async def move_note(self, note_id: int, new_parent_id: int | None) -> Note:
        """
        Re-parent a note.

        Walks the ancestor chain upward from new_parent_id; meeting note_id
        on the way means the move would close a cycle. A chain that ends at
        a missing note is treated like one that ends at a root.

        Raises:
            NotFoundError: If note not found
            CycleError: If new_parent_id is note_id or one of its descendants
        """
        await self.repo.get_by_id(note_id)

        self._log_mutation("Moving note", note_id=note_id, new_parent_id=new_parent_id)

        return await self._execute_db_operation(
            "move_note",
            self._move(note_id, new_parent_id),
        )

    async def _move(self, note_id: int, new_parent_id: int | None) -> Note:
        await self._ensure_not_own_ancestor(note_id, new_parent_id)
        return await self.repo.set_parent(note_id, new_parent_id)

    async def _ensure_not_own_ancestor(
        self,
        note_id: int,
        new_parent_id: int | None,
    ) -> None:
        visited: set[int] = set()
        current = new_parent_id

        while current is not None:
            if current == note_id:
                self._logger.warning(
                    "Move rejected, would create a cycle",
                    extra={"note_id": note_id, "new_parent_id": new_parent_id},
                )
                raise CycleError()
            if current in visited:
                # Pre-existing cycle above the target that does not include note_id
                self._logger.warning(
                    "Ancestor chain already cyclic",
                    extra={"note_id": note_id, "at": current},
                )
                return
            visited.add(current)
            current = await self.repo.get_parent_id(current)

    async def get_path(self, note_id: int) -> list[Note]:
        """
        Return the ancestor chain of a note, root first, ending with the note.

        The walk stops at a root, at a missing (orphaning) parent, or on
        revisiting a note.

        Raises:
            NotFoundError: If note not found
        """
        note = await self.repo.get_by_id(note_id)
        chain = [note]
        seen = {note.id}

        parent_id = note.parent_id
        while parent_id is not None and parent_id not in seen:
            parent = await self.repo.get_by_id_or_none(parent_id)
            if parent is None:
                break
            chain.append(parent)
            seen.add(parent.id)
            parent_id = parent.parent_id

        chain.reverse()
        return chain

