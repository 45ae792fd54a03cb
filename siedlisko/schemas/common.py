"""
Shared schema building blocks.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema speaking camelCase on the wire while accepting snake_case input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str = Field(..., examples=["Listing deleted successfully"])
