"""
Base Schemas.

Standard API response envelopes and the camelCase wire model base.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from modules.backend.core.utils import utc_now

DataT = TypeVar("DataT")


class WireModel(BaseModel):
    """
    Base for request/response bodies.

    Fields are snake_case in Python and camelCase on the wire
    (parent_id <-> parentId). Either spelling is accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ResponseMetadata(BaseModel):
    """Metadata included in all API responses."""

    timestamp: datetime = Field(default_factory=utc_now)
    request_id: str | None = None


class ApiResponse(BaseModel, Generic[DataT]):
    """
    Standard API response envelope.

    All successful API responses use this structure for consistency.
    """

    success: bool = True
    data: DataT | None = None
    error: str | None = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """
    Standard error response.

    `error` is always a human-readable string; `code` is the stable
    machine-readable identifier.
    """

    success: bool = False
    data: None = None
    error: str
    code: str
    details: dict[str, Any] | None = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)
