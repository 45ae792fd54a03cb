"""
Pydantic schemas for user views.
"""

from pydantic import ConfigDict, Field
from typing import Optional
import uuid

from siedlisko.models.user import UserRole
from siedlisko.schemas.common import CamelModel


class UserPublic(CamelModel):
    """Public view of a user, never includes credentials."""

    id: uuid.UUID
    email: str = Field(..., examples=["jan.kowalski@example.com"])
    name: Optional[str] = None
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(CamelModel):
    """Profile endpoint payload."""

    message: str
    user: UserPublic
