"""
Listing model for property-for-sale advertisements.
Handles the listing lifecycle (draft, published, archived), Polish property
vocabularies and the relationship to the owner and attached images.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, JSON, DateTime, Enum as SQLEnum, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from siedlisko.database import Base
from datetime import datetime
from decimal import Decimal
import enum
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from siedlisko.models.user import User
    from siedlisko.models.image import ListingImage


class Province(str, enum.Enum):
    """The 16 Polish voivodeships."""
    DOLNOSLASKIE = "dolnośląskie"
    KUJAWSKO_POMORSKIE = "kujawsko-pomorskie"
    LUBELSKIE = "lubelskie"
    LUBUSKIE = "lubuskie"
    LODZKIE = "łódzkie"
    MALOPOLSKIE = "małopolskie"
    MAZOWIECKIE = "mazowieckie"
    OPOLSKIE = "opolskie"
    PODKARPACKIE = "podkarpackie"
    PODLASKIE = "podlaskie"
    POMORSKIE = "pomorskie"
    SLASKIE = "śląskie"
    SWIETOKRZYSKIE = "świętokrzyskie"
    WARMINSKO_MAZURSKIE = "warmińsko-mazurskie"
    WIELKOPOLSKIE = "wielkopolskie"
    ZACHODNIOPOMORSKIE = "zachodniopomorskie"


class PropertyType(str, enum.Enum):
    """Kind of property being sold."""
    DOM = "dom"
    DZIALKA = "dzialka"
    DOM_Z_DZIALKA = "dom_z_dzialka"
    SIEDLISKO = "siedlisko"
    GOSPODARSTWO = "gospodarstwo"


class AdvertiserType(str, enum.Enum):
    """Who is placing the advertisement."""
    PRYWATNY = "prywatny"
    FIRMA = "firma"
    AGENCJA = "agencja"


class ListingFeature(str, enum.Enum):
    """Tags describing the surroundings and condition of the property."""
    PRZY_LESIE = "przy_lesie"
    BEZ_SASIADOW_300M = "bez_sasiadow_300m"
    DO_REMONTU = "do_remontu"
    GOTOWE_DO_ZAMIESZKANIA = "gotowe_do_zamieszkania"
    Z_WIDOKIEM = "z_widokiem"
    PRZY_JEZIORZE = "przy_jeziorze"
    PRZY_RZECE = "przy_rzece"
    MEDIA_W_DZIALCE = "media_w_dzialce"
    DROGA_ASFALTOWA = "droga_asfaltowa"
    OKOLICA_SPOKOJNA = "okolica_spokojna"


class ListingStatus(str, enum.Enum):
    """Lifecycle state of a listing."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


def _enum_values(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]


def _value_enum(enum_cls, length: int) -> SQLEnum:
    """Store enum values (not member names) in a plain VARCHAR column."""
    return SQLEnum(enum_cls, native_enum=False, length=length, values_callable=_enum_values)


class Listing(Base):
    """
    Property listing owned by a single user.

    Descriptive columns are nullable so an owner can save an incomplete
    draft; completeness is enforced when the listing is published.
    """

    __tablename__ = "listings"

    title: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=True,
        index=True,
        comment="Asking price in PLN"
    )

    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    province: Mapped[Optional[Province]] = mapped_column(_value_enum(Province, 32), nullable=True, index=True)
    property_type: Mapped[Optional[PropertyType]] = mapped_column(_value_enum(PropertyType, 32), nullable=True, index=True)
    advertiser_type: Mapped[Optional[AdvertiserType]] = mapped_column(_value_enum(AdvertiserType, 16), nullable=True)

    plot_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="Plot area in m2")
    house_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="House area in m2")

    features: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    contact_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    negotiable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    status: Mapped[ListingStatus] = mapped_column(
        _value_enum(ListingStatus, 16),
        nullable=False,
        default=ListingStatus.DRAFT,
        index=True
    )

    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who owns this listing"
    )

    owner: Mapped["User"] = relationship(
        "User",
        back_populates="listings",
        lazy="raise"
    )

    # Image rows go with the listing; detaching an image is done on the image row itself
    images: Mapped[List["ListingImage"]] = relationship(
        "ListingImage",
        back_populates="listing",
        cascade="all",
        lazy="selectin",
        order_by="[ListingImage.display_order.asc(), ListingImage.created_at.asc()]"
    )

    __table_args__ = (
        Index("ix_listings_status_created", "status", "created_at"),
        Index("ix_listings_owner_status", "owner_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, status={self.status}, title={self.title!r})>"

    @property
    def image_ids(self) -> List[uuid.UUID]:
        return [image.id for image in self.images]

    @property
    def is_published(self) -> bool:
        return self.status == ListingStatus.PUBLISHED
