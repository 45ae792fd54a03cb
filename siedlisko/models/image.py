"""
ListingImage model for uploaded listing photos.
Handles image metadata, stored file location and the optional listing association.
"""

from sqlalchemy import String, Integer, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from siedlisko.database import Base
import uuid
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from siedlisko.models.listing import Listing


class ListingImage(Base):
    """
    Uploaded image, optionally attached to a listing.

    Images are uploaded before the listing form is submitted, so a row may
    exist without a listing (an orphan) until it is attached.
    """

    __tablename__ = "listing_images"

    listing_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        comment="ID of the listing this image is attached to"
    )

    uploaded_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="ID of the user who uploaded the file"
    )

    filename: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Generated name of the stored file"
    )

    original_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Filename as sent by the client"
    )

    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)

    file_size: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="File size in bytes"
    )

    file_path: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Public path of the stored file"
    )

    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    display_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Position in the listing gallery"
    )

    listing: Mapped[Optional["Listing"]] = relationship(
        "Listing",
        back_populates="images",
        lazy="raise"
    )

    __table_args__ = (
        Index("ix_listing_images_listing_order", "listing_id", "display_order"),
    )

    def __repr__(self) -> str:
        return f"<ListingImage(id={self.id}, listing_id={self.listing_id}, filename={self.filename})>"

    @property
    def is_orphan(self) -> bool:
        return self.listing_id is None
