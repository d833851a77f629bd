"""
Image Service.

Stores uploaded images as base64 text and serves them back.
"""

import base64
import binascii

from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.exceptions import ValidationError
from modules.backend.models.image import Image
from modules.backend.repositories.image import ImageRepository
from modules.backend.schemas.image import ImageUpload
from modules.backend.services.base import BaseService


class ImageService(BaseService):
    """Service for image upload and retrieval. Images are never updated."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = ImageRepository(session)

    async def upload_image(self, data: ImageUpload) -> Image:
        """
        Store a new image.

        Raises:
            ValidationError: If data is not valid base64
        """
        decode_base64(data.data)

        self._log_mutation(
            "Uploading image",
            filename=data.filename,
            mimetype=data.mimetype,
        )

        image = await self._execute_db_operation(
            "upload_image",
            self.repo.create(
                filename=data.filename,
                mimetype=data.mimetype,
                data=data.data,
            ),
        )

        self._log_debug("Image stored", image_id=image.id)
        return image

    async def get_image(self, image_id: str) -> Image:
        """
        Raises:
            NotFoundError: If image not found
        """
        return await self.repo.get_by_id(image_id)

    async def get_image_bytes(self, image_id: str) -> tuple[Image, bytes]:
        """
        Return the image record with its decoded payload.

        Raises:
            NotFoundError: If image not found
        """
        image = await self.repo.get_by_id(image_id)
        return image, decode_base64(image.data)


def decode_base64(payload: str) -> bytes:
    """
    Strictly decode a base64 payload.

    Raises:
        ValidationError: If payload contains non-alphabet characters or bad padding
    """
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(
            "Image data is not valid base64",
            details={"data": str(e)},
        ) from e
