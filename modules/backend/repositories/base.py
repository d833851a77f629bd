"""
Base Repository.

Primary-key access shared by the note and image repositories. Writes
flush but never commit; the session owner decides the transaction.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import NotFoundError
from modules.backend.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Keyed CRUD for one model.

        class NoteRepository(BaseRepository[Note]):
            model = Note
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id_or_none(self, id: int | str) -> ModelType | None:
        # Served from the identity map when the row is already loaded
        return await self.session.get(self.model, id)

    async def get_by_id(self, id: int | str) -> ModelType:
        """
        Raises:
            NotFoundError: "<Model> not found" when no row has this key
        """
        instance = await self.get_by_id_or_none(id)
        if instance is None:
            raise NotFoundError(f"{self.model.__name__} not found")
        return instance

    async def get_all(self) -> list[ModelType]:
        result = await self.session.execute(select(self.model).order_by(self.model.id))
        return list(result.scalars().all())

    async def create(self, **values: Any) -> ModelType:
        """Insert a row and return it with database defaults loaded."""
        instance = self.model(**values)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, id: int | str, **changes: Any) -> ModelType:
        """
        Assign column values on an existing row.

        Raises:
            NotFoundError: If no row has this key
            ValueError: If a key in changes is not a column of the model
        """
        unknown = set(changes) - set(self.model.__table__.columns.keys())
        if unknown:
            raise ValueError(f"{self.model.__name__} has no column(s) {sorted(unknown)}")

        instance = await self.get_by_id(id)
        for column, value in changes.items():
            setattr(instance, column, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance
