"""
Image Schemas.

Pydantic schemas for image upload and retrieval.
"""

from pydantic import Field

from modules.backend.schemas.base import WireModel


class ImageUpload(WireModel):
    """Schema for uploading an image as base64."""

    filename: str = Field(..., min_length=1, max_length=255, examples=["plot.png"])
    mimetype: str = Field(..., min_length=1, max_length=127, examples=["image/png"])
    data: str = Field(..., min_length=1, description="Base64-encoded image bytes")


class ImageSummary(WireModel):
    """Image record without its payload, returned by upload."""

    id: str
    filename: str
    mimetype: str
    created_at: int


class ImageResponse(ImageSummary):
    """Full image record including the base64 payload."""

    data: str
