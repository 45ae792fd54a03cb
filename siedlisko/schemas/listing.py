"""
Pydantic schemas for listing requests and responses.

The same field rules are used in three shapes:

* ``ListingBase`` - every required field present (the strict shape)
* ``ListingCreate`` / ``ListingUpdate`` - every field optional, still
  constrained when supplied, so drafts may be incomplete
* ``ListingPublish`` - the strict shape plus at least two attached images
"""

from pydantic import ConfigDict, EmailStr, Field, StringConstraints, field_validator, model_validator
from pydantic_core import PydanticCustomError
from typing import Annotated, List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

from siedlisko.config import settings
from siedlisko.models.listing import AdvertiserType, ListingFeature, ListingStatus, PropertyType, Province
from siedlisko.schemas.common import CamelModel
from siedlisko.schemas.image import ListingImageResponse


PHONE_PATTERN = r"^[0-9+\-\s()]{9,20}$"

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=100)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, min_length=50, max_length=5000)]
City = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
ContactName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
ContactPhone = Annotated[str, StringConstraints(strip_whitespace=True, pattern=PHONE_PATTERN)]
Price = Annotated[Decimal, Field(gt=0, le=100_000_000)]
PlotSize = Annotated[int, Field(gt=0, le=10_000_000)]
HouseSize = Annotated[int, Field(gt=0, le=10_000)]

# Fields a draft may leave out but may never explicitly clear
NON_NULLABLE_FIELDS = (
    "title",
    "description",
    "price",
    "city",
    "province",
    "property_type",
    "advertiser_type",
    "features",
    "contact_name",
    "contact_phone",
    "negotiable",
)


class ListingFieldRules(CamelModel):
    """Validators shared by every listing shape."""

    @field_validator("features", mode="after", check_fields=False)
    @classmethod
    def deduplicate_features(cls, v):
        """Keep the first occurrence of every feature."""
        if v is None:
            return v
        return list(dict.fromkeys(v))

    @field_validator("contact_email", mode="before", check_fields=False)
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ListingBase(ListingFieldRules):
    """Complete listing content; every required field must be present."""

    title: Title = Field(..., examples=["Siedlisko pod lasem z widokiem na jezioro"])
    description: Description
    price: Price = Field(..., description="Asking price in PLN", examples=[350000])
    city: City
    province: Province
    property_type: PropertyType
    advertiser_type: AdvertiserType
    plot_size: Optional[PlotSize] = Field(None, description="Plot area in m2")
    house_size: Optional[HouseSize] = Field(None, description="House area in m2")
    features: List[ListingFeature] = Field(default_factory=list)
    contact_name: ContactName
    contact_phone: ContactPhone = Field(..., examples=["+48 600 100 200"])
    contact_email: Optional[EmailStr] = None
    negotiable: bool = False


class ListingPublish(ListingBase):
    """Listing content eligible for publication."""

    image_ids: List[uuid.UUID] = Field(default_factory=list)

    @field_validator("image_ids")
    @classmethod
    def require_minimum_images(cls, v):
        if len(v) < settings.min_publish_images:
            raise PydanticCustomError(
                "too_few_images",
                "At least {min_images} images are required to publish",
                {"min_images": settings.min_publish_images},
            )
        return v


class ListingFields(ListingFieldRules):
    """Every listing field optional, still constrained when supplied."""

    title: Optional[Title] = None
    description: Optional[Description] = None
    price: Optional[Price] = None
    city: Optional[City] = None
    province: Optional[Province] = None
    property_type: Optional[PropertyType] = None
    advertiser_type: Optional[AdvertiserType] = None
    plot_size: Optional[PlotSize] = None
    house_size: Optional[HouseSize] = None
    features: Optional[List[ListingFeature]] = None
    contact_name: Optional[ContactName] = None
    contact_phone: Optional[ContactPhone] = None
    contact_email: Optional[EmailStr] = None
    negotiable: Optional[bool] = None

    @field_validator(*NON_NULLABLE_FIELDS, mode="before")
    @classmethod
    def reject_explicit_null(cls, v):
        if v is None:
            raise PydanticCustomError("null_not_allowed", "Field may be omitted but not set to null")
        return v

    def listing_values(self) -> dict:
        """Column values explicitly supplied by the client."""
        return self.model_dump(
            include=set(ListingFields.model_fields) & self.model_fields_set,
            mode="python",
        )


class ListingCreate(ListingFields):
    """Schema for creating a listing; the result is always a draft."""

    status: ListingStatus = Field(
        ListingStatus.DRAFT,
        description="Requested status; new listings are always stored as drafts"
    )
    image_ids: List[uuid.UUID] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Siedlisko pod lasem",
                "city": "Olsztynek",
                "province": "warmińsko-mazurskie",
                "propertyType": "siedlisko",
                "features": ["przy_lesie", "okolica_spokojna"],
                "imageIds": [],
            }
        }
    )

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v == ListingStatus.ARCHIVED:
            raise PydanticCustomError("status", "Status must be draft or published")
        return v


class ListingUpdate(ListingFields):
    """
    Schema for updating a listing.

    ``image_ids`` replaces the attached image set when supplied. Status is
    not accepted here; it changes only through publish, unpublish and archive.
    """

    image_ids: Optional[List[uuid.UUID]] = None


class ListingFilters(CamelModel):
    """Public search filters for listing queries."""

    city: Optional[str] = Field(None, max_length=100)
    province: Optional[Province] = None
    property_type: Optional[PropertyType] = None
    advertiser_type: Optional[AdvertiserType] = None
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)
    min_plot_size: Optional[int] = Field(None, ge=0)
    max_plot_size: Optional[int] = Field(None, ge=0)
    features: List[ListingFeature] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_ranges(self):
        """Validate that range bounds are not inverted."""
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("minPrice cannot be greater than maxPrice")
        if (
            self.min_plot_size is not None
            and self.max_plot_size is not None
            and self.min_plot_size > self.max_plot_size
        ):
            raise ValueError("minPlotSize cannot be greater than maxPlotSize")
        return self


class ListingResponse(CamelModel):
    """Listing as returned by the API, with its ordered images."""

    id: uuid.UUID
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    city: Optional[str] = None
    province: Optional[Province] = None
    property_type: Optional[PropertyType] = None
    advertiser_type: Optional[AdvertiserType] = None
    plot_size: Optional[int] = None
    house_size: Optional[int] = None
    features: List[str] = Field(default_factory=list)
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    negotiable: bool = False
    status: ListingStatus
    owner_id: uuid.UUID
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    images: List[ListingImageResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ImageReorderRequest(CamelModel):
    """New gallery order for a listing, first id shown first."""

    image_ids: List[uuid.UUID]
