# Pydantic schemas package
from modules.backend.schemas.base import (
    ApiResponse,
    ErrorResponse,
    ResponseMetadata,
    WireModel,
)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "ResponseMetadata",
    "WireModel",
]
