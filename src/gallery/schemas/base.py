"""Translation of schema validation failures into protocol errors."""

from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.gallery.core.exceptions import ValidationError

_VALUE_ERROR_PREFIX = "Value error, "


def first_error_message(exc: PydanticValidationError) -> str:
    """User-facing text of the first failed check."""
    errors = exc.errors()
    if not errors:
        return str(exc)
    message = str(errors[0].get("msg", ""))
    return message.removeprefix(_VALUE_ERROR_PREFIX)


def parse_input[SchemaType: BaseModel](
    schema: type[SchemaType], payload: SchemaType | dict[str, Any]
) -> SchemaType:
    """Validate a raw payload (or pass through an already-built schema).

    Raises:
        ValidationError: with the first failure's message.
    """
    if isinstance(payload, schema):
        return payload
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(first_error_message(e)) from e
