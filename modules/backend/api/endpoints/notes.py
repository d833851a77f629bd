"""
Notes API Endpoints.

REST API endpoints for the note hierarchy.
"""

from fastapi import APIRouter

from modules.backend.core.dependencies import NoteId, NoteServiceDep, ParentId
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.note import (
    NoteCreate,
    NoteMove,
    NotePathEntry,
    NoteResponse,
    NoteUpdate,
)

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[NoteResponse]],
    summary="List notes",
    description="Get every note as a flat list. Clients build the tree themselves.",
)
async def list_notes(service: NoteServiceDep) -> ApiResponse[list[NoteResponse]]:
    notes = await service.list_notes()
    return ApiResponse(data=[NoteResponse.model_validate(note) for note in notes])


@router.post(
    "",
    response_model=ApiResponse[NoteResponse],
    status_code=201,
    summary="Create a note",
    description="Create a note under an optional parent. Content defaults to a placeholder.",
)
async def create_note(
    data: NoteCreate,
    service: NoteServiceDep,
) -> ApiResponse[NoteResponse]:
    note = await service.create_note(data)
    return ApiResponse(data=NoteResponse.model_validate(note))


# Declared before /{note_id} so "by-parent" is never read as an id
@router.get(
    "/by-parent/{parent_id}",
    response_model=ApiResponse[list[NoteResponse]],
    summary="List children",
    description='Get direct children of a note. Use "null" for root notes.',
)
async def list_children(
    parent_id: ParentId,
    service: NoteServiceDep,
) -> ApiResponse[list[NoteResponse]]:
    notes = await service.get_children(parent_id)
    return ApiResponse(data=[NoteResponse.model_validate(note) for note in notes])


@router.get(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Get a note",
)
async def get_note(note_id: NoteId, service: NoteServiceDep) -> ApiResponse[NoteResponse]:
    note = await service.get_note(note_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.put(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Update a note",
    description="Replace a note's name and content.",
)
async def update_note(
    note_id: NoteId,
    data: NoteUpdate,
    service: NoteServiceDep,
) -> ApiResponse[NoteResponse]:
    note = await service.update_note(note_id, data)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.delete(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Delete a note",
    description="Delete a note and all of its descendants. Returns the deleted note.",
)
async def delete_note(note_id: NoteId, service: NoteServiceDep) -> ApiResponse[NoteResponse]:
    note = await service.delete_note(note_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.post(
    "/{note_id}/move",
    response_model=ApiResponse[NoteResponse],
    summary="Move a note",
    description="Re-parent a note. Moving a note under itself or a descendant fails with 409.",
)
async def move_note(
    note_id: NoteId,
    data: NoteMove,
    service: NoteServiceDep,
) -> ApiResponse[NoteResponse]:
    note = await service.move_note(note_id, data.new_parent_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.get(
    "/{note_id}/path",
    response_model=ApiResponse[list[NotePathEntry]],
    summary="Get a note's ancestry",
    description="Ancestor chain from the root down to the note itself.",
)
async def get_note_path(
    note_id: NoteId,
    service: NoteServiceDep,
) -> ApiResponse[list[NotePathEntry]]:
    chain = await service.get_path(note_id)
    return ApiResponse(data=[NotePathEntry.model_validate(note) for note in chain])
