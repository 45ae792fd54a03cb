"""
Database models for the Siedlisko Listings API.
Includes User, Listing and ListingImage models with their vocabularies.
"""

from siedlisko.models.user import User, UserRole
from siedlisko.models.listing import (
    Listing,
    ListingStatus,
    Province,
    PropertyType,
    AdvertiserType,
    ListingFeature,
)
from siedlisko.models.image import ListingImage

__all__ = [
    "User",
    "UserRole",
    "Listing",
    "ListingStatus",
    "Province",
    "PropertyType",
    "AdvertiserType",
    "ListingFeature",
    "ListingImage",
]
