"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

import uuid
from typing import Annotated

from fastapi import Depends, Header, Path
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.core.database import get_db_session
from modules.backend.core.exceptions import ValidationError
from modules.backend.core.logging import get_logger
from modules.backend.schemas.note import ID_MAX, ID_MIN
from modules.backend.services.image import ImageService
from modules.backend.services.note import NoteService

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """Extract or generate request ID from headers."""
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


def _parse_int(raw: str, message: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(message, details={"value": raw}) from None
    if not ID_MIN <= value <= ID_MAX:
        raise ValidationError(message, details={"value": raw})
    return value


async def parse_note_id(note_id: str = Path(...)) -> int:
    """Path note id as int; anything else is a 400 rather than a 422."""
    return _parse_int(note_id, "Invalid note ID")


NoteId = Annotated[int, Depends(parse_note_id)]


async def parse_parent_id(parent_id: str = Path(...)) -> int | None:
    """Path parent id: the literal "null" selects root notes."""
    if parent_id == "null":
        return None
    return _parse_int(parent_id, "Invalid parent ID")


ParentId = Annotated[int | None, Depends(parse_parent_id)]


async def get_note_service(db: DbSession) -> NoteService:
    return NoteService(db)


async def get_image_service(db: DbSession) -> ImageService:
    return ImageService(db)


NoteServiceDep = Annotated[NoteService, Depends(get_note_service)]
ImageServiceDep = Annotated[ImageService, Depends(get_image_service)]
