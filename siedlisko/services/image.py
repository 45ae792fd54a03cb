"""
Image service for listing photo uploads, removal and gallery ordering.
Handles file validation, storage and ownership checks.
"""

from typing import List, Optional, Sequence, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import UploadFile
from siedlisko.config import settings
from siedlisko.database import transaction
from siedlisko.repositories.image import ImageRepository
from siedlisko.repositories.listing import ListingRepository
from siedlisko.models.image import ListingImage
from siedlisko.models.listing import Listing
from siedlisko.models.user import User
from siedlisko.utils.exceptions import (
    FileUploadError,
    ForbiddenError,
    ImageNotFoundError,
    ListingNotFoundError,
    ListingOwnershipError,
    TooManyFilesError,
    ValidationError,
)
from siedlisko.utils.file_utils import FileStorage, FileValidator
import uuid
import logging

logger = logging.getLogger(__name__)

# (content, mime_type, extension, width, height, original_name)
ValidatedUpload = Tuple[bytes, str, str, int, int, str]


class ImageService:
    """
    Service for managing listing images.

    Images can be uploaded before their listing exists; such orphan images
    are attached later through listing create/update.
    """

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorage] = None):
        self.db = db_session
        self.image_repo = ImageRepository(db_session)
        self.listing_repo = ListingRepository(db_session)
        self.storage = storage or FileStorage()

    async def save_image(
        self,
        file: UploadFile,
        uploader: User,
        listing_id: Optional[uuid.UUID] = None,
        order: int = 0
    ) -> ListingImage:
        """
        Validate, store and record a single image.

        Args:
            file: Uploaded file
            uploader: Authenticated user uploading the file
            listing_id: Listing to attach to, or None for an orphan image
            order: Display order within the listing gallery

        Returns:
            Created image record

        Raises:
            ListingNotFoundError: If ``listing_id`` does not exist
            ListingOwnershipError: If the uploader does not own that listing
            BadRequestError: If the file is not an acceptable image
        """
        if listing_id is not None:
            await self._get_owned_listing(listing_id, uploader)

        upload = await self._validate(file)
        images = await self._store_all([(upload, order)], uploader, listing_id)
        return images[0]

    async def save_images(
        self,
        files: Sequence[UploadFile],
        uploader: User,
        listing_id: Optional[uuid.UUID] = None
    ) -> List[ListingImage]:
        """
        Validate and store a batch of images in one transaction.

        Every file is validated before anything is written. Display order
        follows the batch order, placed after images the listing already has.

        Args:
            files: Uploaded files (1 to the configured maximum)
            uploader: Authenticated user uploading the files
            listing_id: Listing to attach to, or None for orphan images

        Returns:
            Created image records in batch order
        """
        if not files:
            raise FileUploadError("No files provided")
        if len(files) > settings.max_files_per_upload:
            raise TooManyFilesError(len(files), settings.max_files_per_upload)

        offset = 0
        if listing_id is not None:
            listing = await self._get_owned_listing(listing_id, uploader)
            offset = len(listing.images)

        uploads = [await self._validate(file) for file in files]
        return await self._store_all(
            [(upload, offset + index) for index, upload in enumerate(uploads)],
            uploader,
            listing_id,
        )

    async def remove_image(self, image_id: uuid.UUID, current_user: User) -> None:
        """
        Delete an image record and its stored file.

        An attached image may only be removed by the listing owner. An
        orphan image may be removed by any authenticated user.

        Raises:
            ImageNotFoundError: If the image does not exist
            ForbiddenError: If the caller may not remove it
        """
        image = await self.image_repo.get_for_update(image_id)
        if image is None:
            raise ImageNotFoundError(str(image_id))

        if image.listing_id is not None:
            listing = await self.listing_repo.get_by_id(image.listing_id)
            if listing is None or not current_user.owns(listing.owner_id):
                logger.warning(f"User {current_user.id} denied removal of image {image_id}")
                raise ForbiddenError("You can only delete images of your own listings")
        elif image.uploaded_by_id is not None and image.uploaded_by_id != current_user.id:
            logger.warning(f"User {current_user.id} removing orphan image {image_id} uploaded by {image.uploaded_by_id}")

        filename = image.filename
        async with transaction(self.db):
            await self.image_repo.delete(image)

        self.storage.delete(filename)
        logger.info(f"Image {image_id} deleted by user {current_user.email}")

    async def reorder_images(
        self,
        listing_id: uuid.UUID,
        image_ids: Sequence[uuid.UUID],
        current_user: User
    ) -> List[ListingImage]:
        """
        Reorder a listing gallery.

        The given images get display orders 0..n-1 in the given order;
        attached images not mentioned keep their relative order after them.

        Raises:
            ListingOwnershipError: If the listing does not exist or the caller
                is not the owner
            ValidationError: If an id is not attached to this listing
        """
        listing = await self.listing_repo.get_with_images(listing_id)
        if listing is None or not current_user.owns(listing.owner_id):
            logger.warning(f"User {current_user.id} denied reorder of listing {listing_id}")
            raise ListingOwnershipError()
        attached = {image.id: image for image in listing.images}

        ordered_ids = list(dict.fromkeys(image_ids))
        unknown = [image_id for image_id in ordered_ids if image_id not in attached]
        if unknown:
            raise ValidationError(
                "Some images are not attached to this listing",
                field_errors=[
                    {
                        "field": "imageIds",
                        "message": f"Image {image_id} is not attached to this listing",
                        "type": "image_not_attached",
                    }
                    for image_id in unknown
                ],
            )

        mentioned = set(ordered_ids)
        new_order = [attached[image_id] for image_id in ordered_ids]
        new_order.extend(image for image in listing.images if image.id not in mentioned)

        async with transaction(self.db):
            await self.image_repo.set_display_orders(new_order)

        logger.info(f"Images of listing {listing_id} reordered by user {current_user.email}")
        return await self.image_repo.get_by_listing_id(listing_id)

    async def _get_owned_listing(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        listing = await self.listing_repo.get_with_images(listing_id)
        if listing is None:
            raise ListingNotFoundError(str(listing_id))
        if not current_user.owns(listing.owner_id):
            logger.warning(f"User {current_user.id} denied image access to listing {listing_id}")
            raise ListingOwnershipError()
        return listing

    async def _validate(self, file: UploadFile) -> ValidatedUpload:
        content, mime_type, extension, width, height = await FileValidator.read_upload(file)
        return content, mime_type, extension, width, height, file.filename or f"upload{extension}"

    async def _store_all(
        self,
        uploads: Sequence[Tuple[ValidatedUpload, int]],
        uploader: User,
        listing_id: Optional[uuid.UUID]
    ) -> List[ListingImage]:
        """Write files and their rows; on any failure remove every file written."""
        written: List[str] = []
        images: List[ListingImage] = []

        try:
            async with transaction(self.db):
                for (content, mime_type, extension, width, height, original_name), order in uploads:
                    filename = await self.storage.save(content, extension)
                    written.append(filename)
                    image = await self.image_repo.create({
                        "listing_id": listing_id,
                        "uploaded_by_id": uploader.id,
                        "filename": filename,
                        "original_name": original_name[:255],
                        "mime_type": mime_type,
                        "file_size": len(content),
                        "file_path": self.storage.public_path(filename),
                        "width": width,
                        "height": height,
                        "display_order": order,
                    })
                    images.append(image)
        except Exception:
            for filename in written:
                self.storage.delete(filename)
            raise

        logger.info(
            f"User {uploader.email} uploaded {len(images)} images"
            + (f" to listing {listing_id}" if listing_id else "")
        )
        return images
