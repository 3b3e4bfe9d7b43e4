# =============================================================================
# core/models/common.py - Shared Schema Building Blocks
# =============================================================================
# Field types and small models reused by the lab and team schemas:
# - CamelModel: base class speaking camelCase on the wire, snake_case in Python
# - NonEmptyStr / UrlStr / UuidStr / NormalizedUrl: annotated field types
# - MediaAsset, LinkedDocument: child items stored as (name|title, url) rows
#
# Aliases are generated from the snake_case field names, which are also the
# storage column names, so a DTO field maps 1:1 to its column.
# =============================================================================

import re
from typing import Annotated, Any
from uuid import UUID

from pydantic import (
    AfterValidator,
    AnyHttpUrl,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
)
from pydantic.alias_generators import to_camel

_http_url = TypeAdapter(AnyHttpUrl)
_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


class CamelModel(BaseModel):
    """
    Base model for every API entity.

    - Accepts both camelCase (wire) and snake_case (storage) keys
    - Ignores unknown extra keys instead of rejecting them
    - Serializes by alias, so responses are camelCase
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        serialize_by_alias=True,
    )


def _check_url(value: str) -> str:
    # Validate only; keep the caller's exact string (AnyHttpUrl would add a trailing slash)
    _http_url.validate_python(value)
    return value


def _check_uuid(value: str) -> str:
    return str(UUID(value))


def normalize_url(value: Any) -> Any:
    """
    Normalize a loosely typed website value.

    Blank strings become None; values without a scheme get "https://".

    Example:
        normalize_url("glass.bio")  # "https://glass.bio"
        normalize_url("  ")         # None
    """
    if not isinstance(value, str):
        return value
    trimmed = value.strip()
    if not trimmed:
        return None
    if _SCHEME_RE.match(trimmed):
        return trimmed
    return f"https://{trimmed}"


NonEmptyStr = Annotated[str, Field(min_length=1)]
UrlStr = Annotated[str, AfterValidator(_check_url)]
UuidStr = Annotated[str, AfterValidator(_check_uuid)]
NormalizedUrl = Annotated[UrlStr | None, BeforeValidator(normalize_url)]
PositiveId = Annotated[int, Field(gt=0)]


class MediaAsset(CamelModel):
    """A named public URL: lab/team photo, partner logo, compliance document."""

    name: NonEmptyStr
    url: NonEmptyStr


class LinkedDocument(CamelModel):
    """A titled reference such as a publication or patent."""

    title: NonEmptyStr
    url: NonEmptyStr


def none_lists_to_empty(data: Any, list_fields: set[str]) -> Any:
    """
    Treat an explicit null collection as an empty one.

    Patches use key presence to decide which collections to replace, so
    {"photos": null} means "clear photos", the same as {"photos": []}.
    Both camelCase and snake_case keys are handled.
    """
    if not isinstance(data, dict):
        return data
    cleaned = dict(data)
    for field in list_fields:
        for key in (field, to_camel(field)):
            if key in cleaned and cleaned[key] is None:
                cleaned[key] = []
    return cleaned


def reject_null_required(model: BaseModel, required: tuple[str, ...]) -> None:
    """
    Raise if a patch explicitly sets a required field to null.

    Raises:
        ValueError: With the camelCase name of the offending field
    """
    for field in required:
        if field in model.model_fields_set and getattr(model, field) is None:
            raise ValueError(f"{to_camel(field)} cannot be null")
