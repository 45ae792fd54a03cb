"""
Pydantic schemas for listing image responses.
"""

from pydantic import ConfigDict
from typing import Optional
from datetime import datetime
import uuid

from siedlisko.schemas.common import CamelModel


class ListingImageResponse(CamelModel):
    """Stored image metadata; ``file_path`` is the public URL path of the file."""

    id: uuid.UUID
    listing_id: Optional[uuid.UUID] = None
    filename: str
    original_name: str
    mime_type: str
    file_size: int
    file_path: str
    width: Optional[int] = None
    height: Optional[int] = None
    display_order: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
