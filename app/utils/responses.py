"""Generic response models for consistent API responses."""

from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from app.config.settings import settings

T = TypeVar("T")


class ResponseMetadata(BaseModel):
    """Metadata included in all API responses."""

    app_name: str = Field(default=settings.APP_NAME)
    app_version: str = Field(default=settings.APP_VERSION)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SuccessResponse(BaseModel, Generic[T]):
    """Generic success response with data and metadata."""

    success: bool = Field(default=True)
    message: str = Field(default="Operation completed successfully")
    data: T
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class ErrorResponse(BaseModel):
    """Standard error response structure.

    ``error`` is a stable machine-readable code (``not_found``, ``conflict``,
    ``forbidden``, ``invariant_violation`` ...); ``detail`` is for people.
    """

    success: bool = Field(default=False)
    error: str
    detail: Optional[str] = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": False,
                "error": "conflict",
                "detail": "Device BC9001 is already registered",
                "metadata": {
                    "app_name": "Device Console",
                    "app_version": "1.0.0",
                    "timestamp": "2025-12-18T09:30:00Z",
                },
            }
        }
    }


class PaginationMeta(BaseModel):
    """Pagination metadata."""

    page: int = Field(ge=1, description="Current page number")
    limit: int = Field(ge=1, le=1000, description="Items per page")
    total: int = Field(ge=0, description="Total number of filtered items")
    pages: int = Field(ge=0, description="Total number of pages")
    has_next: bool = Field(description="Whether there is a next page")
    has_prev: bool = Field(description="Whether there is a previous page")


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated response with data and pagination metadata."""

    success: bool = Field(default=True)
    message: str = Field(default="Items retrieved successfully")
    data: List[T]
    pagination: PaginationMeta
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


def success_response(data: T, message: str = "Operation completed successfully") -> SuccessResponse[T]:
    """Create a success response."""
    return SuccessResponse(success=True, message=message, data=data)


def error_response(error: str, detail: Optional[str] = None) -> ErrorResponse:
    """Create an error response."""
    return ErrorResponse(success=False, error=error, detail=detail)


def paginated_response(
    data: List[T],
    page: int,
    limit: int,
    total: int,
    message: str = "Items retrieved successfully",
) -> PaginatedResponse[T]:
    """Create a paginated response."""
    pages = (total + limit - 1) // limit if total > 0 else 0

    return PaginatedResponse(
        success=True,
        message=message,
        data=data,
        pagination=PaginationMeta(
            page=page,
            limit=limit,
            total=total,
            pages=pages,
            has_next=page < pages,
            has_prev=page > 1
        ),
    )
