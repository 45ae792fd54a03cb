"""
Listing repository with lifecycle-aware queries and search filtering.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, desc, cast, String
from sqlalchemy.orm import selectinload
from siedlisko.repositories.base import BaseRepository
from siedlisko.models.listing import Listing, ListingStatus
from siedlisko.schemas.listing import ListingFilters
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingRepository(BaseRepository[Listing]):
    """
    Repository for listings.
    Every read loads the ordered image collection with the listing.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    async def get_with_images(self, listing_id: uuid.UUID) -> Optional[Listing]:
        """
        Load a listing with a freshly queried image collection.

        Identity-mapped instances are overwritten, so the result reflects
        image rows changed earlier in the same session.

        Args:
            listing_id: ID of the listing

        Returns:
            Listing if found, None otherwise
        """
        try:
            query = (
                select(Listing)
                .where(Listing.id == listing_id)
                .options(selectinload(Listing.images))
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to load listing {listing_id}: {e}")
            raise

    async def search(
        self,
        status: ListingStatus = ListingStatus.PUBLISHED,
        owner_id: Optional[uuid.UUID] = None,
        filters: Optional[ListingFilters] = None,
        skip: int = 0,
        limit: int = 20
    ) -> List[Listing]:
        """
        Search listings of one status, newest first.

        Args:
            status: Lifecycle status to return
            owner_id: Restrict to listings of this owner
            filters: Optional search filters
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return

        Returns:
            List of listings with their images
        """
        try:
            conditions = [Listing.status == status]
            if owner_id is not None:
                conditions.append(Listing.owner_id == owner_id)
            if filters is not None:
                conditions.extend(self._build_filter_conditions(filters))

            query = (
                select(Listing)
                .where(and_(*conditions))
                .options(selectinload(Listing.images))
                .order_by(desc(Listing.created_at))
                .offset(skip)
                .limit(limit)
            )

            result = await self.db.execute(query)
            listings = list(result.scalars().all())
            logger.debug(f"Listing search ({status.value}) returned {len(listings)} results")
            return listings
        except Exception as e:
            logger.error(f"Failed to search listings: {e}")
            raise

    async def get_by_owner(self, owner_id: uuid.UUID) -> List[Listing]:
        """
        Get every listing of an owner regardless of status, newest first.

        Args:
            owner_id: ID of the owner

        Returns:
            List of listings with their images
        """
        try:
            query = (
                select(Listing)
                .where(Listing.owner_id == owner_id)
                .options(selectinload(Listing.images))
                .order_by(desc(Listing.created_at))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get listings of owner {owner_id}: {e}")
            raise

    def _build_filter_conditions(self, filters: ListingFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.

        Args:
            filters: ListingFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        # City filter (case-insensitive partial match)
        if filters.city:
            conditions.append(Listing.city.ilike(f"%{filters.city.strip()}%"))

        if filters.province:
            conditions.append(Listing.province == filters.province)
        if filters.property_type:
            conditions.append(Listing.property_type == filters.property_type)
        if filters.advertiser_type:
            conditions.append(Listing.advertiser_type == filters.advertiser_type)

        # Price range filters
        if filters.min_price is not None:
            conditions.append(Listing.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Listing.price <= filters.max_price)

        # Plot size range filters
        if filters.min_plot_size is not None:
            conditions.append(Listing.plot_size >= filters.min_plot_size)
        if filters.max_plot_size is not None:
            conditions.append(Listing.plot_size <= filters.max_plot_size)

        # Listing must carry every requested feature; JSON arrays hold quoted values
        for feature in filters.features:
            conditions.append(cast(Listing.features, String).like(f'%"{feature.value}"%'))

        return conditions
