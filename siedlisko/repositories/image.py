"""
Listing image repository handling attachment and gallery ordering.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_, or_
from siedlisko.repositories.base import BaseRepository
from siedlisko.models.image import ListingImage
from typing import List, Optional, Sequence
import uuid
import logging

logger = logging.getLogger(__name__)


class ImageRepository(BaseRepository[ListingImage]):
    """Repository for uploaded listing images."""

    def __init__(self, db: AsyncSession):
        super().__init__(ListingImage, db)

    async def get_by_listing_id(self, listing_id: uuid.UUID) -> List[ListingImage]:
        """
        Get the images of a listing in gallery order.

        Args:
            listing_id: ID of the listing

        Returns:
            Images ordered by display order, then upload time
        """
        query = (
            select(ListingImage)
            .where(ListingImage.listing_id == listing_id)
            .order_by(ListingImage.display_order.asc(), ListingImage.created_at.asc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_attachable(
        self,
        image_ids: Sequence[uuid.UUID],
        listing_id: uuid.UUID,
        owner_id: uuid.UUID
    ) -> List[ListingImage]:
        """
        Get the images among ``image_ids`` that may be attached to a listing.

        An image qualifies when it is already attached to this listing, or
        when it is an orphan that the listing owner uploaded (or whose
        uploader is unknown).

        Args:
            image_ids: Candidate image IDs
            listing_id: Target listing
            owner_id: Owner of the target listing

        Returns:
            Qualifying images (order not significant)
        """
        if not image_ids:
            return []

        query = select(ListingImage).where(
            and_(
                ListingImage.id.in_(list(image_ids)),
                or_(
                    ListingImage.listing_id == listing_id,
                    and_(
                        ListingImage.listing_id.is_(None),
                        or_(
                            ListingImage.uploaded_by_id == owner_id,
                            ListingImage.uploaded_by_id.is_(None),
                        ),
                    ),
                ),
            )
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def attach(
        self,
        listing_id: uuid.UUID,
        image_ids: Sequence[uuid.UUID],
        owner_id: uuid.UUID
    ) -> List[ListingImage]:
        """
        Attach images to a listing, ordering them by their position in ``image_ids``.

        IDs that do not qualify (see ``get_attachable``) are skipped.

        Args:
            listing_id: Target listing
            image_ids: Images to attach, in gallery order
            owner_id: Owner of the target listing

        Returns:
            The attached images in gallery order
        """
        # Keep first occurrence of duplicated ids
        ordered_ids = list(dict.fromkeys(image_ids))
        images = {image.id: image for image in await self.get_attachable(ordered_ids, listing_id, owner_id)}

        attached = []
        for image_id in ordered_ids:
            image = images.get(image_id)
            if image is None:
                logger.warning(f"Skipping image {image_id}: not attachable to listing {listing_id}")
                continue
            image.listing_id = listing_id
            image.display_order = len(attached)
            attached.append(image)

        await self.db.flush()
        logger.debug(f"Attached {len(attached)} images to listing {listing_id}")
        return attached

    async def detach_all(self, listing_id: uuid.UUID) -> int:
        """
        Detach every image from a listing, turning them into orphans.

        Args:
            listing_id: ID of the listing

        Returns:
            Number of detached images
        """
        stmt = (
            update(ListingImage)
            .where(ListingImage.listing_id == listing_id)
            .values(listing_id=None, display_order=0)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        logger.debug(f"Detached {result.rowcount} images from listing {listing_id}")
        return result.rowcount

    async def set_display_orders(self, images: Sequence[ListingImage]) -> None:
        """
        Assign display orders 0..n-1 following the sequence order.

        Args:
            images: Images in their new gallery order
        """
        for position, image in enumerate(images):
            image.display_order = position
        await self.db.flush()

    async def get_for_update(self, image_id: uuid.UUID) -> Optional[ListingImage]:
        """Load an image ignoring any stale identity-mapped state."""
        query = (
            select(ListingImage)
            .where(ListingImage.id == image_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
