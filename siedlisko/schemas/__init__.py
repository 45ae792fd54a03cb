"""
Pydantic schemas for request/response validation.
"""

from siedlisko.schemas.common import CamelModel, MessageResponse
from siedlisko.schemas.auth import UserRegister, UserLogin, AuthResponse
from siedlisko.schemas.user import UserPublic, ProfileResponse
from siedlisko.schemas.image import ListingImageResponse
from siedlisko.schemas.listing import (
    ListingBase,
    ListingPublish,
    ListingCreate,
    ListingUpdate,
    ListingFilters,
    ListingResponse,
    ImageReorderRequest,
)
from siedlisko.schemas.error import ErrorDetail, ErrorResponse, APIErrorResponse, get_error_responses

__all__ = [
    "CamelModel",
    "MessageResponse",
    "UserRegister",
    "UserLogin",
    "AuthResponse",
    "UserPublic",
    "ProfileResponse",
    "ListingImageResponse",
    "ListingBase",
    "ListingPublish",
    "ListingCreate",
    "ListingUpdate",
    "ListingFilters",
    "ListingResponse",
    "ImageReorderRequest",
    "ErrorDetail",
    "ErrorResponse",
    "APIErrorResponse",
    "get_error_responses",
]
