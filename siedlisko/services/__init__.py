"""
Service layer for business logic implementation.
Contains services for authentication, listings, images and error handling.
"""

from .auth import AuthService
from .listing import ListingService
from .image import ImageService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "ListingService",
    "ImageService",
    "ErrorHandlerService",
]
