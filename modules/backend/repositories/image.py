"""
Image Repository.

Data access layer for uploaded images.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.models.image import Image
from modules.backend.repositories.base import BaseRepository


class ImageRepository(BaseRepository[Image]):
    """Repository for Image model. Images are insert-only."""

    model = Image

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
