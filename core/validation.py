# =============================================================================
# core/validation.py - Payload Validation
# =============================================================================
# Single entry point for validating incoming payloads against the schemas in
# core/models. Pydantic's error list is reduced to the first issue and raised
# as the API's ValidationError so routes can answer 400 with one message.
#
# Usage:
#   from core.validation import parse_payload
#   team = parse_payload(TeamCreate, request_body)
# =============================================================================

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

_VALUE_ERROR_PREFIX = "Value error, "


def first_issue(exc: PydanticValidationError) -> tuple[str | None, str]:
    """
    Extract (field path, message) from the first pydantic error.

    Field paths use the keys the caller sent, e.g. "members.1.role".
    Model-level errors have no field and return None.
    """
    errors = exc.errors()
    if not errors:
        return None, "Invalid payload"

    first = errors[0]
    message = first.get("msg", "Invalid value")
    if message.startswith(_VALUE_ERROR_PREFIX):
        message = message[len(_VALUE_ERROR_PREFIX):]

    loc = [str(part) for part in first.get("loc", ())]
    return (".".join(loc) or None), message


def parse_payload(model: type[ModelT], payload: Any) -> ModelT:
    """
    Validate a payload against a schema.

    Args:
        model: The pydantic model to validate against
        payload: Raw request data (dict); None is treated as an empty object

    Returns:
        The validated model instance

    Raises:
        ValidationError: With the first failing field and its message
    """
    if payload is None:
        payload = {}
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, dict):
        raise ValidationError("Payload must be a JSON object")

    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        field, message = first_issue(exc)
        raise ValidationError(message, field=field) from exc
