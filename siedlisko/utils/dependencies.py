"""
FastAPI dependency injection utilities for authentication, services and storage.
Provides reusable dependencies for route protection and user extraction.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from siedlisko.database import get_db
from siedlisko.models.user import User
from siedlisko.services.auth import AuthService
from siedlisko.services.image import ImageService
from siedlisko.services.listing import ListingService
from siedlisko.utils.exceptions import UnauthorizedError
from siedlisko.utils.file_utils import FileStorage


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_file_storage() -> FileStorage:
    """Storage for uploaded listing images under the configured upload directory."""
    return FileStorage()


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_listing_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage)
) -> ListingService:
    return ListingService(db, storage)


async def get_image_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage)
) -> ImageService:
    return ImageService(db, storage)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current User object

    Raises:
        UnauthorizedError: If no token is provided, the token is invalid or
            expired, or the account is gone or inactive
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[User]:
    """
    Get current user if a valid token is provided, otherwise None.

    Used by public endpoints whose result depends on who is asking.
    """
    if not credentials:
        return None

    try:
        return await auth_service.get_current_user(credentials.credentials)
    except UnauthorizedError:
        return None
