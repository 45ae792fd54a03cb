"""
Image upload API endpoints.
Images may be uploaded before their listing exists and attached later.
"""

import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from siedlisko.models.user import User
from siedlisko.schemas.common import MessageResponse
from siedlisko.schemas.error import get_error_responses
from siedlisko.schemas.image import ListingImageResponse
from siedlisko.services.image import ImageService
from siedlisko.utils.dependencies import get_current_user, get_image_service
from siedlisko.utils.exceptions import ValidationError

router = APIRouter(prefix="/listings/images", tags=["Images"])


def parse_listing_id(value: Optional[str]) -> Optional[uuid.UUID]:
    """Form field to listing id; blank means no listing."""
    if value is None or not value.strip():
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        raise ValidationError(
            "Invalid listing ID",
            field_errors=[{"field": "listingId", "message": "Must be a valid UUID", "type": "uuid_parsing"}]
        )


@router.post(
    "/upload",
    response_model=List[ListingImageResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Upload images",
    description="Upload up to 10 JPEG, PNG or WebP images of at most 10MB each.",
    responses=get_error_responses(400, 401, 403, 404)
)
async def upload_images(
    images: List[UploadFile] = File(..., description="Image files"),
    listing_id: Optional[str] = Form(None, alias="listingId"),
    current_user: User = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service)
):
    return await image_service.save_images(images, current_user, parse_listing_id(listing_id))


@router.post(
    "/upload-single",
    response_model=ListingImageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a single image",
    responses=get_error_responses(400, 401, 403, 404)
)
async def upload_single_image(
    image: UploadFile = File(..., description="Image file"),
    listing_id: Optional[str] = Form(None, alias="listingId"),
    order: int = Form(0, ge=0),
    current_user: User = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service)
):
    return await image_service.save_image(image, current_user, parse_listing_id(listing_id), order)


@router.delete(
    "/{image_id}",
    response_model=MessageResponse,
    summary="Delete an image",
    responses=get_error_responses(401, 403, 404)
)
async def delete_image(
    image_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service)
) -> MessageResponse:
    await image_service.remove_image(image_id, current_user)
    return MessageResponse(message="Image deleted successfully")
