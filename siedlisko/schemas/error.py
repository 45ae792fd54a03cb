"""
Error response schemas for API documentation.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, examples=["title"])
    message: str = Field(..., examples=["String should have at least 10 characters"])
    type: Optional[str] = Field(None, examples=["string_too_short"])


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., examples=["VALIDATION_ERROR"])
    message: str = Field(..., examples=["Request validation failed"])
    timestamp: str = Field(..., examples=["2024-01-01T00:00:00Z"])
    request_id: Optional[str] = Field(None, examples=["abc12345"])
    details: Optional[List[ErrorDetail]] = None


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse


_DESCRIPTIONS = {
    400: "Bad Request - Invalid request parameters",
    401: "Unauthorized - Authentication required",
    403: "Forbidden - Not the owner of the resource",
    404: "Not Found - Resource does not exist",
    409: "Conflict - Resource already exists",
    422: "Validation Error - Field errors listed in details",
    500: "Internal Server Error",
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary usable as a route's ``responses`` argument
    """
    return {
        code: {"description": _DESCRIPTIONS[code], "model": APIErrorResponse}
        for code in status_codes
        if code in _DESCRIPTIONS
    }
