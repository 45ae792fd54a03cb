"""
Listing service implementing the listing lifecycle and ownership rules.

A listing is created as a draft, may be edited freely by its owner,
becomes publicly visible only once it passes the publish rules, and can be
unpublished, archived or deleted by its owner.
"""

from typing import Any, Dict, List, Mapping, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import ValidationError as PydanticValidationError
from siedlisko.database import transaction, utcnow
from siedlisko.repositories.listing import ListingRepository
from siedlisko.repositories.image import ImageRepository
from siedlisko.models.listing import Listing, ListingStatus
from siedlisko.models.user import User
from siedlisko.schemas.listing import (
    ListingBase,
    ListingCreate,
    ListingFields,
    ListingFilters,
    ListingPublish,
    ListingUpdate,
)
from siedlisko.utils.exceptions import (
    ForbiddenError,
    ListingNotFoundError,
    ListingNotPublishableError,
    ListingOwnershipError,
)
from siedlisko.utils.file_utils import FileStorage
from siedlisko.utils.validators import field_errors_from, validate_payload
from decimal import Decimal, ROUND_HALF_UP
import uuid
import logging

logger = logging.getLogger(__name__)

# Listing.price is Numeric(12, 2)
PRICE_STEP = Decimal("0.01")


class ListingService:
    """
    Listing service for the draft/publish/archive lifecycle.
    Every mutation is checked against the listing owner and runs as one transaction.
    """

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorage] = None):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.image_repo = ImageRepository(db_session)
        self.storage = storage or FileStorage()

    async def create(self, payload: Mapping[str, Any], owner: User) -> Listing:
        """
        Create a draft listing, optionally attaching uploaded images.

        Args:
            payload: Raw listing data; every field optional
            owner: User creating the listing

        Returns:
            Created listing with its images

        Raises:
            ValidationError: If a supplied field violates its constraints
        """
        data = validate_payload(ListingCreate, payload, "Listing data is invalid")

        if data.status != ListingStatus.DRAFT:
            logger.debug(f"Ignoring requested status {data.status.value} on create by {owner.id}")

        values = self._column_values(data)
        values.update({"owner_id": owner.id, "status": ListingStatus.DRAFT})

        async with transaction(self.db):
            listing = await self.listing_repo.create(values)
            if data.image_ids:
                await self.image_repo.attach(listing.id, data.image_ids, owner.id)

        logger.info(f"Listing created by user {owner.email}: {listing.id}")
        return await self._reload(listing.id)

    async def find_all(
        self,
        status: Optional[ListingStatus] = None,
        current_user: Optional[User] = None,
        filters: Optional[ListingFilters] = None,
        skip: int = 0,
        limit: int = 20
    ) -> List[Listing]:
        """
        List listings of one status, newest first.

        Published listings are public. Any other status is only served for
        the caller's own listings, so anonymous callers get an empty list.

        Args:
            status: Status to list; defaults to published
            current_user: Optional authenticated caller
            filters: Optional search filters
            skip: Pagination offset
            limit: Pagination size

        Returns:
            Matching listings with their images
        """
        status = status or ListingStatus.PUBLISHED
        owner_id = None

        if status != ListingStatus.PUBLISHED:
            if current_user is None:
                return []
            owner_id = current_user.id

        return await self.listing_repo.search(
            status=status,
            owner_id=owner_id,
            filters=filters,
            skip=skip,
            limit=limit,
        )

    async def find_one(self, listing_id: uuid.UUID, current_user: Optional[User] = None) -> Listing:
        """
        Get a single listing.

        Raises:
            ListingNotFoundError: If the listing does not exist
            ForbiddenError: If it is not published and the caller is not its owner
        """
        listing = await self.listing_repo.get_with_images(listing_id)
        if listing is None:
            raise ListingNotFoundError(str(listing_id))

        if listing.status != ListingStatus.PUBLISHED:
            if current_user is None or not current_user.owns(listing.owner_id):
                raise ForbiddenError("You don't have permission to view this listing")

        return listing

    async def find_my_listings(self, owner: User) -> List[Listing]:
        """All listings of the owner in any status, newest first."""
        return await self.listing_repo.get_by_owner(owner.id)

    async def update(self, listing_id: uuid.UUID, payload: Mapping[str, Any], current_user: User) -> Listing:
        """
        Update listing fields and optionally replace its image set.

        Only fields present in the payload change. When ``imageIds`` is
        present, all current images are detached and exactly the given
        images are attached in the given order.

        Args:
            listing_id: ID of the listing
            payload: Raw partial listing data
            current_user: Acting user

        Returns:
            Updated listing with its images

        Raises:
            ListingNotFoundError: If the listing does not exist
            ListingOwnershipError: If the caller is not the owner
            ValidationError: If a supplied field violates its constraints
        """
        listing = await self._get_owned(listing_id, current_user)
        data = validate_payload(ListingUpdate, payload, "Listing data is invalid")
        values = self._column_values(data)

        async with transaction(self.db):
            if values:
                await self.listing_repo.update(listing, values)
            if data.image_ids is not None:
                await self.image_repo.detach_all(listing.id)
                await self.image_repo.attach(listing.id, data.image_ids, current_user.id)

        logger.info(f"Listing updated by user {current_user.email}: {listing_id}")
        return await self._reload(listing_id)

    async def publish(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        """
        Publish a listing whose stored state passes the publish rules.

        Raises:
            ListingNotFoundError: If the listing does not exist
            ListingOwnershipError: If the caller is not the owner
            ListingNotPublishableError: With every failing field; the listing is left unchanged
        """
        listing = await self._get_owned(listing_id, current_user)

        try:
            ListingPublish.model_validate(self._publish_candidate(listing))
        except PydanticValidationError as e:
            logger.info(f"Listing {listing_id} not publishable: {e.error_count()} field errors")
            raise ListingNotPublishableError(field_errors_from(e))

        values: Dict[str, Any] = {"status": ListingStatus.PUBLISHED}
        if listing.published_at is None:
            values["published_at"] = utcnow()

        async with transaction(self.db):
            await self.listing_repo.update(listing, values)

        logger.info(f"Listing published by user {current_user.email}: {listing_id}")
        return await self._reload(listing_id)

    async def unpublish(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        """Return a listing to draft."""
        return await self._set_status(listing_id, ListingStatus.DRAFT, current_user)

    async def archive(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        """Archive a listing."""
        return await self._set_status(listing_id, ListingStatus.ARCHIVED, current_user)

    async def remove(self, listing_id: uuid.UUID, current_user: User) -> None:
        """
        Delete a listing together with its images and their stored files.

        Raises:
            ListingNotFoundError: If the listing does not exist
            ListingOwnershipError: If the caller is not the owner
        """
        listing = await self._get_owned(listing_id, current_user)
        filenames = [image.filename for image in listing.images]

        async with transaction(self.db):
            await self.listing_repo.delete(listing)

        for filename in filenames:
            self.storage.delete(filename)

        logger.info(
            f"Listing deleted by user {current_user.email}: {listing_id} ({len(filenames)} images removed)"
        )

    async def _set_status(self, listing_id: uuid.UUID, status: ListingStatus, current_user: User) -> Listing:
        listing = await self._get_owned(listing_id, current_user)

        async with transaction(self.db):
            await self.listing_repo.update(listing, {"status": status})

        logger.info(f"Listing {listing_id} set to {status.value} by user {current_user.email}")
        return await self._reload(listing_id)

    async def _get_owned(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        """Load a listing and make sure the caller owns it."""
        listing = await self.listing_repo.get_with_images(listing_id)
        if listing is None:
            raise ListingNotFoundError(str(listing_id))

        if not current_user.owns(listing.owner_id):
            logger.warning(f"User {current_user.id} denied access to listing {listing_id}")
            raise ListingOwnershipError()

        return listing

    async def _reload(self, listing_id: uuid.UUID) -> Listing:
        listing = await self.listing_repo.get_with_images(listing_id)
        if listing is None:
            raise ListingNotFoundError(str(listing_id))
        return listing

    @staticmethod
    def _column_values(data: ListingFields) -> Dict[str, Any]:
        """Explicitly supplied listing fields as column values."""
        values = data.listing_values()
        if values.get("features") is not None:
            values["features"] = [feature.value for feature in values["features"]]
        if values.get("price") is not None:
            values["price"] = values["price"].quantize(PRICE_STEP, rounding=ROUND_HALF_UP)
        return values

    @staticmethod
    def _publish_candidate(listing: Listing) -> Dict[str, Any]:
        """Stored listing state in the shape checked by the publish rules."""
        candidate = {field: getattr(listing, field) for field in ListingBase.model_fields}
        candidate["image_ids"] = listing.image_ids
        return candidate
