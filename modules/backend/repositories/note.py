"""
Note Repository.

Data access layer for notes. Handles all database operations
for the Note model, including the hierarchy queries.
"""

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.models.note import Note
from modules.backend.repositories.base import BaseRepository


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note model.

    Inherits standard CRUD operations from BaseRepository
    and adds parent/child queries.
    """

    model = Note

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_children(self, parent_id: int | None) -> list[Note]:
        """
        Get the direct children of a note.

        Args:
            parent_id: Parent note id, or None for root notes

        Returns:
            Notes whose parent_id equals parent_id (IS NULL for roots)
        """
        if parent_id is None:
            condition = Note.parent_id.is_(None)
        else:
            condition = Note.parent_id == parent_id

        result = await self.session.execute(
            select(Note).where(condition).order_by(Note.id)
        )
        return list(result.scalars().all())

    async def search_by_name(self, text: str) -> list[Note]:
        """
        Substring match on name.

        LIKE wildcards in text are escaped. Case sensitivity follows the
        database collation (case-insensitive for ASCII on SQLite).
        """
        result = await self.session.execute(
            select(Note)
            .where(Note.name.contains(text, autoescape=True))
            .order_by(Note.id)
        )
        return list(result.scalars().all())

    async def get_parent_id(self, note_id: int) -> int | None:
        """Return the parent id of a note, or None if it is a root or absent."""
        result = await self.session.execute(
            select(Note.parent_id).where(Note.id == note_id)
        )
        return result.scalar_one_or_none()

    async def get_descendant_ids(self, note_id: int) -> list[int]:
        """
        Collect the ids of all transitive descendants in one query.

        Uses a recursive CTE with UNION (not UNION ALL) so the walk
        terminates even if the stored data already contains a cycle.
        """
        descendants = (
            select(Note.id)
            .where(Note.parent_id == note_id)
            .cte(name="descendants", recursive=True)
        )
        descendants = descendants.union(
            select(Note.id).where(Note.parent_id == descendants.c.id)
        )

        result = await self.session.execute(select(descendants.c.id))
        return [row_id for row_id in result.scalars().all() if row_id != note_id]

    async def delete_many(self, ids: Iterable[int]) -> int:
        """
        Delete every note whose id is in ids with a single statement.

        Returns:
            Number of rows removed
        """
        id_list = list(ids)
        if not id_list:
            return 0

        result = await self.session.execute(
            delete(Note).where(Note.id.in_(id_list))
        )
        await self.session.flush()
        return result.rowcount

    async def set_parent(self, note_id: int, parent_id: int | None) -> Note:
        """
        Re-parent a note without touching name or content.

        Raises:
            NotFoundError: If note not found
        """
        return await self.update(note_id, parent_id=parent_id)
