"""
Images API Endpoints.

Upload and retrieval of images embedded in note content.
"""

from fastapi import APIRouter, Response

from modules.backend.core.dependencies import ImageServiceDep
from modules.backend.schemas.base import ApiResponse
from modules.backend.schemas.image import ImageResponse, ImageSummary, ImageUpload

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[ImageSummary],
    status_code=201,
    summary="Upload an image",
    description="Store a base64-encoded image. The payload is not echoed back.",
)
async def upload_image(
    data: ImageUpload,
    service: ImageServiceDep,
) -> ApiResponse[ImageSummary]:
    image = await service.upload_image(data)
    return ApiResponse(data=ImageSummary.model_validate(image))


@router.get(
    "/{image_id}",
    response_model=ApiResponse[ImageResponse],
    summary="Get an image",
)
async def get_image(image_id: str, service: ImageServiceDep) -> ApiResponse[ImageResponse]:
    image = await service.get_image(image_id)
    return ApiResponse(data=ImageResponse.model_validate(image))


@router.get(
    "/{image_id}/raw",
    response_class=Response,
    summary="Get image bytes",
    description="Decoded image with its stored mimetype, usable as an <img> src.",
)
async def get_image_raw(image_id: str, service: ImageServiceDep) -> Response:
    image, payload = await service.get_image_bytes(image_id)
    return Response(content=payload, media_type=image.mimetype)
