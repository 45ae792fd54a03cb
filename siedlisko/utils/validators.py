"""
Validation helpers bridging pydantic schemas and the API exception model.
"""

from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar
from pydantic import BaseModel, ValidationError as PydanticValidationError

from siedlisko.utils.exceptions import ValidationError

SchemaType = TypeVar("SchemaType", bound=BaseModel)


def field_errors_from(exc: PydanticValidationError) -> List[Dict[str, str]]:
    """
    Flatten a pydantic validation error into field error entries.

    Args:
        exc: Pydantic validation error

    Returns:
        One ``{"field", "message", "type"}`` entry per violation
    """
    field_errors = []

    for error in exc.errors():
        field_path = " -> ".join(str(loc) for loc in error["loc"]) or "__root__"
        field_errors.append({
            "field": field_path,
            "message": error["msg"],
            "type": error["type"],
        })

    return field_errors


def handle_pydantic_validation_error(
    exc: PydanticValidationError,
    message: str = "Request validation failed"
) -> ValidationError:
    """Convert a pydantic validation error to the API ValidationError."""
    return ValidationError(detail=message, field_errors=field_errors_from(exc))


def validate_payload(
    schema_class: Type[SchemaType],
    payload: Optional[Mapping[str, Any]],
    message: str = "Request validation failed"
) -> SchemaType:
    """
    Validate an untyped payload against a schema.

    Args:
        schema_class: Pydantic schema to validate with
        payload: Raw mapping, usually a decoded JSON body
        message: Error message used when validation fails

    Returns:
        Validated schema instance

    Raises:
        ValidationError: Listing every violated field
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValidationError(
            detail=message,
            field_errors=[{"field": "__root__", "message": "Payload must be an object", "type": "dict_type"}]
        )

    try:
        return schema_class.model_validate(dict(payload))
    except PydanticValidationError as e:
        raise handle_pydantic_validation_error(e, message)
