"""
Listing API endpoints.
Handles listing CRUD, lifecycle transitions, search and gallery ordering.
"""

import uuid
from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from siedlisko.config import settings
from siedlisko.models.listing import AdvertiserType, ListingFeature, ListingStatus, PropertyType, Province
from siedlisko.models.user import User
from siedlisko.schemas.common import MessageResponse
from siedlisko.schemas.error import get_error_responses
from siedlisko.schemas.listing import (
    ImageReorderRequest,
    ListingCreate,
    ListingFilters,
    ListingResponse,
    ListingUpdate,
)
from siedlisko.services.image import ImageService
from siedlisko.services.listing import ListingService
from siedlisko.utils.dependencies import (
    get_current_user,
    get_image_service,
    get_listing_service,
    get_optional_current_user,
)
from siedlisko.utils.validators import validate_payload


router = APIRouter(prefix="/listings", tags=["Listings"])


@router.get(
    "",
    response_model=List[ListingResponse],
    summary="Search listings",
    description="Published listings by default. Other statuses only return the caller's own listings."
)
async def list_listings(
    listing_status: Optional[ListingStatus] = Query(None, alias="status"),
    city: Optional[str] = Query(None, max_length=100),
    province: Optional[Province] = Query(None),
    property_type: Optional[PropertyType] = Query(None, alias="propertyType"),
    advertiser_type: Optional[AdvertiserType] = Query(None, alias="advertiserType"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    min_plot_size: Optional[int] = Query(None, alias="minPlotSize", ge=0),
    max_plot_size: Optional[int] = Query(None, alias="maxPlotSize", ge=0),
    features: Optional[List[ListingFeature]] = Query(None, description="Listing must have all of these"),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: Optional[User] = Depends(get_optional_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    filters = validate_payload(
        ListingFilters,
        {
            "city": city,
            "province": province,
            "property_type": property_type,
            "advertiser_type": advertiser_type,
            "min_price": min_price,
            "max_price": max_price,
            "min_plot_size": min_plot_size,
            "max_plot_size": max_plot_size,
            "features": features or [],
        },
        "Invalid search filters"
    )

    return await listing_service.find_all(
        status=listing_status,
        current_user=current_user,
        filters=filters,
        skip=skip,
        limit=limit,
    )


@router.get(
    "/my/all",
    response_model=List[ListingResponse],
    summary="Listings of the authenticated user",
    responses=get_error_responses(401)
)
async def list_my_listings(
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    return await listing_service.find_my_listings(current_user)


@router.get(
    "/{listing_id}",
    response_model=ListingResponse,
    summary="Get a listing",
    description="Drafts and archived listings are only visible to their owner.",
    responses=get_error_responses(403, 404)
)
async def get_listing(
    listing_id: uuid.UUID,
    current_user: Optional[User] = Depends(get_optional_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    return await listing_service.find_one(listing_id, current_user)


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a draft listing",
    description="Every field is optional. The listing is always stored as a draft.",
    responses=get_error_responses(401, 422)
)
async def create_listing(
    listing_data: ListingCreate,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    return await listing_service.create(listing_data.model_dump(exclude_unset=True), current_user)


@router.put(
    "/{listing_id}",
    response_model=ListingResponse,
    summary="Update a listing",
    description="Only supplied fields change. Supplying imageIds replaces the attached images.",
    responses=get_error_responses(401, 403, 404, 422)
)
async def update_listing(
    listing_id: uuid.UUID,
    listing_data: ListingUpdate,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    return await listing_service.update(listing_id, listing_data.model_dump(exclude_unset=True), current_user)


@router.post(
    "/{listing_id}/publish",
    response_model=ListingResponse,
    summary="Publish a listing",
    description="Requires every required field and at least two images.",
    responses=get_error_responses(401, 403, 404, 422)
)
async def publish_listing(
    listing_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    return await listing_service.publish(listing_id, current_user)


@router.post(
    "/{listing_id}/unpublish",
    response_model=ListingResponse,
    summary="Return a listing to draft",
    responses=get_error_responses(401, 403, 404)
)
async def unpublish_listing(
    listing_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    return await listing_service.unpublish(listing_id, current_user)


@router.post(
    "/{listing_id}/archive",
    response_model=ListingResponse,
    summary="Archive a listing",
    responses=get_error_responses(401, 403, 404)
)
async def archive_listing(
    listing_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
):
    return await listing_service.archive(listing_id, current_user)


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    summary="Delete a listing",
    description="Deletes the listing together with all of its images.",
    responses=get_error_responses(401, 403, 404)
)
async def delete_listing(
    listing_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> MessageResponse:
    await listing_service.remove(listing_id, current_user)
    return MessageResponse(message="Listing deleted successfully")


@router.post(
    "/{listing_id}/images/reorder",
    response_model=MessageResponse,
    summary="Reorder listing images",
    responses=get_error_responses(401, 403, 422)
)
async def reorder_listing_images(
    listing_id: uuid.UUID,
    reorder_data: ImageReorderRequest,
    current_user: User = Depends(get_current_user),
    image_service: ImageService = Depends(get_image_service)
) -> MessageResponse:
    await image_service.reorder_images(listing_id, reorder_data.image_ids, current_user)
    return MessageResponse(message="Images reordered successfully")
