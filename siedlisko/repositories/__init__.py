"""
Repository layer for data access.
"""

from siedlisko.repositories.base import BaseRepository
from siedlisko.repositories.user import UserRepository
from siedlisko.repositories.listing import ListingRepository
from siedlisko.repositories.image import ImageRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ListingRepository",
    "ImageRepository",
]
