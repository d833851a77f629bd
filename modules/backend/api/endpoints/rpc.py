"""
RPC API Endpoint.

Procedure-style access to the note hierarchy: POST /rpc/{procedure}
with a JSON body of the form {"input": ...}. Each procedure declares
the shape of its input, which is validated before any service runs.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from modules.backend.core.dependencies import ImageServiceDep, NoteServiceDep
from modules.backend.core.exceptions import NotFoundError
from modules.backend.core.logging import get_logger
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.image import ImageResponse, ImageSummary, ImageUpload
from modules.backend.schemas.note import (
    NoteCreate,
    NoteIdValue,
    NoteMove,
    NoteResponse,
    NoteUpdate,
)
from modules.backend.services.image import ImageService
from modules.backend.services.note import NoteService

logger = get_logger(__name__)

router = APIRouter()


class RpcCall(BaseModel):
    """Request body for a procedure call."""

    input: Any = Field(default=None, description="Procedure input")


class NoteUpdateInput(NoteUpdate):
    id: NoteIdValue


class NoteMoveInput(NoteMove):
    id: NoteIdValue
    # Key required here; null still means "move to the root"
    new_parent_id: NoteIdValue | None = Field(...)


@dataclass(frozen=True)
class Services:
    notes: NoteService
    images: ImageService


@dataclass(frozen=True)
class Procedure:
    input_type: Any
    handler: Callable[[Services, Any], Awaitable[Any]]


def _note(note: Any) -> dict[str, Any]:
    return NoteResponse.model_validate(note).model_dump(mode="json", by_alias=True)


def _notes(notes: list[Any]) -> list[dict[str, Any]]:
    return [_note(note) for note in notes]


async def _note_list(services: Services, _: None) -> Any:
    return _notes(await services.notes.list_notes())


async def _note_by_id(services: Services, note_id: int) -> Any:
    return _note(await services.notes.get_note(note_id))


async def _notes_by_parent_id(services: Services, parent_id: int | None) -> Any:
    return _notes(await services.notes.get_children(parent_id))


async def _notes_search(services: Services, text: str) -> Any:
    return _notes(await services.notes.search_notes(text))


async def _note_create(services: Services, data: NoteCreate) -> Any:
    return _note(await services.notes.create_note(data))


async def _note_update(services: Services, data: NoteUpdateInput) -> Any:
    return _note(await services.notes.update_note(data.id, data))


async def _note_delete(services: Services, note_id: int) -> Any:
    return _note(await services.notes.delete_note(note_id))


async def _note_move(services: Services, data: NoteMoveInput) -> Any:
    return _note(await services.notes.move_note(data.id, data.new_parent_id))


async def _image_upload(services: Services, data: ImageUpload) -> Any:
    image = await services.images.upload_image(data)
    return ImageSummary.model_validate(image).model_dump(mode="json", by_alias=True)


async def _image_get(services: Services, image_id: str) -> Any:
    image = await services.images.get_image(image_id)
    return ImageResponse.model_validate(image).model_dump(mode="json", by_alias=True)


PROCEDURES: dict[str, Procedure] = {
    "noteList": Procedure(None, _note_list),
    "noteById": Procedure(NoteIdValue, _note_by_id),
    "notesByParentId": Procedure(NoteIdValue | None, _notes_by_parent_id),
    "notesSearch": Procedure(str, _notes_search),
    "noteCreate": Procedure(NoteCreate, _note_create),
    "noteUpdate": Procedure(NoteUpdateInput, _note_update),
    "noteDelete": Procedure(NoteIdValue, _note_delete),
    "noteMove": Procedure(NoteMoveInput, _note_move),
    "imageUpload": Procedure(ImageUpload, _image_upload),
    "imageGet": Procedure(str, _image_get),
}


def _validate_input(procedure: Procedure, raw: Any) -> Any:
    if procedure.input_type is None:
        return None
    try:
        return TypeAdapter(procedure.input_type).validate_python(raw)
    except PydanticValidationError as e:
        errors = [
            {**err, "loc": ("body", "input", *err["loc"])}
            for err in e.errors(include_url=False, include_context=False)
        ]
        raise RequestValidationError(errors) from e


@router.post(
    "/rpc/{procedure}",
    response_model=ApiResponse[Any],
    summary="Call a procedure",
    description="Invoke a named procedure. Unknown names return 404.",
)
async def call_procedure(
    procedure: str,
    notes: NoteServiceDep,
    images: ImageServiceDep,
    call: RpcCall | None = None,
) -> ApiResponse[Any]:
    entry = PROCEDURES.get(procedure)
    if entry is None:
        raise NotFoundError(f"Unknown procedure: {procedure}")

    payload = _validate_input(entry, call.input if call else None)
    logger.debug("Procedure call", extra={"procedure": procedure})

    result = await entry.handler(Services(notes=notes, images=images), payload)
    return ApiResponse(data=result)
