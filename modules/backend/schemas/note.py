"""
Note Schemas.

Pydantic schemas for note API request/response validation.
"""

from datetime import datetime
from typing import Annotated

from pydantic import Field

from modules.backend.schemas.base import WireModel

NAME_MAX_LENGTH = 255

# SQLite INTEGER is a signed 64-bit value
ID_MIN = -(2**63)
ID_MAX = 2**63 - 1

NoteIdValue = Annotated[int, Field(ge=ID_MIN, le=ID_MAX)]


class NoteCreate(WireModel):
    """Schema for creating a new note."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        description="Note name",
        examples=["Linear algebra"],
    )
    parent_id: NoteIdValue | None = Field(
        default=None,
        description="Parent note id; omitted or null creates a root note",
    )
    content: str | None = Field(
        default=None,
        description="Serialized rich-text markup; defaults to the configured placeholder",
        examples=["<p>Eigenvalues</p>"],
    )


class NoteUpdate(WireModel):
    """Schema for replacing a note's name and content."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        description="Note name",
    )
    content: str = Field(
        ...,
        description="Serialized rich-text markup",
    )


class NoteMove(WireModel):
    """Schema for moving a note under a new parent."""

    new_parent_id: NoteIdValue | None = Field(
        default=None,
        description="New parent note id; null moves the note to the root",
    )


class NoteResponse(WireModel):
    """Schema for note in API responses."""

    id: int = Field(description="Note identifier")
    name: str = Field(description="Note name")
    parent_id: int | None = Field(default=None, description="Parent note id")
    content: str = Field(default="", description="Serialized rich-text markup")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")


class NotePathEntry(WireModel):
    """One step of a note's ancestry, root first."""

    id: int
    name: str
