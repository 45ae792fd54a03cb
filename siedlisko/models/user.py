"""
User model with authentication and role management.
Handles accounts of listing owners and administrators.
"""

from sqlalchemy import String, Boolean, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from siedlisko.database import Base
import enum
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from siedlisko.models.listing import Listing


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """
    User model for authentication and authorization.
    A user owns any number of listings; deleting the user deletes them.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - unique, stored lower-cased"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    name: Mapped[Optional[str]] = mapped_column(
        String(80),
        nullable=True,
        comment="Display name"
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, native_enum=False, length=16),
        nullable=False,
        default=UserRole.USER,
        comment="User role for access control"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Whether the user account is active"
    )

    listings: Mapped[List["Listing"]] = relationship(
        "Listing",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN

    def owns(self, owner_id: Optional[uuid.UUID]) -> bool:
        """Check whether this user is the given owner."""
        return owner_id is not None and self.id == owner_id
