"""
Pydantic schemas for authentication requests and responses.
Handles registration, login and issued token data validation.
"""

from pydantic import EmailStr, Field, StringConstraints, field_validator
from typing import Annotated, Optional

from siedlisko.schemas.common import CamelModel
from siedlisko.schemas.user import UserPublic


class UserRegister(CamelModel):
    """Registration request schema."""

    email: EmailStr = Field(..., examples=["jan.kowalski@example.com"])
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (minimum 8 characters)"
    )
    name: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=80)]] = Field(
        None,
        examples=["Jan Kowalski"]
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class UserLogin(CamelModel):
    """Login request schema."""

    email: EmailStr = Field(..., examples=["jan.kowalski@example.com"])
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class AuthResponse(CamelModel):
    """Issued access token together with the authenticated user."""

    access_token: str = Field(..., examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."])
    token_type: str = "bearer"
    user: UserPublic
