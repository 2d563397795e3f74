"""
Standard Response Models

Provides consistent response structures for all API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Generic, TypeVar, Optional
from datetime import datetime, UTC

T = TypeVar('T')


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SuccessResponse(BaseModel, Generic[T]):
    """
    Standard success response wrapper.

    Response:
        ```json
        {
            "success": true,
            "data": { ... },
            "message": "List created successfully",
            "timestamp": "2026-01-13T10:30:00.000Z"
        }
        ```
    """
    success: bool = Field(True, description="Always true for success responses")
    data: T = Field(..., description="Response payload")
    message: Optional[str] = Field(None, description="Optional success message")
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Response timestamp (UTC)"
    )


class ErrorResponse(BaseModel):
    """
    Standard error response.

    Response:
        ```json
        {
            "success": false,
            "error_code": "list_is_archived",
            "message": "List 3 is archived",
            "details": {"list_id": 3},
            "timestamp": "2026-01-13T10:30:00.000Z",
            "request_id": null
        }
        ```
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error_code": "list_not_found",
                "message": "List 12 does not exist",
                "details": {"list_id": 12},
                "timestamp": "2026-01-13T10:30:00.000Z",
                "request_id": "a1b2c3d4"
            }
        }
    )

    success: bool = Field(False, description="Always false for error responses")
    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(None, description="Additional error context")
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Error timestamp (UTC)"
    )
    request_id: Optional[str] = Field(None, description="Request ID for debugging")

    def model_dump(self, **kwargs) -> dict:
        """Override model_dump to serialize datetime to ISO format for JSON compatibility."""
        data = super().model_dump(**kwargs)
        if isinstance(data.get("timestamp"), datetime):
            data["timestamp"] = data["timestamp"].isoformat()
        return data


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated list response."""
    success: bool = Field(True, description="Always true for success responses")
    data: list[T] = Field(..., description="List of items")
    total: int = Field(..., description="Total number of items (all pages)")
    page: int = Field(..., description="1-based page number")
    per_page: int = Field(..., description="Maximum items per page")
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Response timestamp (UTC)"
    )
