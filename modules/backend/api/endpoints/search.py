"""
Search API Endpoint.

Substring search over note names.
"""

from fastapi import APIRouter, Query

from modules.backend.core.dependencies import NoteServiceDep
from modules.backend.core.exceptions import ValidationError
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.note import NoteResponse

router = APIRouter()


@router.get(
    "/search",
    response_model=ApiResponse[list[NoteResponse]],
    summary="Search notes",
    description="Find notes whose name contains the query text.",
)
async def search_notes(
    service: NoteServiceDep,
    q: str | None = Query(default=None, description="Substring to look for"),
) -> ApiResponse[list[NoteResponse]]:
    if not q:
        raise ValidationError("Search query is required")
    notes = await service.search_notes(q)
    return ApiResponse(data=[NoteResponse.model_validate(note) for note in notes])
