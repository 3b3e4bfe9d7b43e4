# =============================================================================
# core/models/lab.py - Lab Schemas
# =============================================================================
# These models define the API contract for labs:
# - LabCreate: full payload for POST /labs (every collection written)
# - LabUpdate: partial payload for PUT/PATCH /labs/{id}; only the keys
#   present in the request are validated and written
# - Lab: the entity returned to clients, reassembled from storage
# - SubscriptionTier / OfferOption: enumerations stored as plain text
#
# Child collections (photos, partner logos, compliance labels and docs,
# publications, patents, equipment, focus areas, offers) live in their own
# tables and are replaced wholesale when named in a payload.
# =============================================================================

from enum import Enum
from typing import Annotated

from pydantic import BeforeValidator, EmailStr, Field, model_validator

from .common import (
    CamelModel,
    LinkedDocument,
    MediaAsset,
    NonEmptyStr,
    PositiveId,
    UuidStr,
    none_lists_to_empty,
    reject_null_required,
)


class OfferOption(str, Enum):
    """Ways a lab can be rented."""
    MONTHLY_RENT = "Monthly rent"
    HOURLY_RATE = "Hourly rate"
    EQUIPMENT_USE_RATE = "Equipment use rate"
    DAY_RATE = "Day rate"


class SubscriptionTier(str, Enum):
    """
    Listing tier of a lab.

    Stored as text; unknown values read back as BASE and the legacy
    "custom" tier reads back as VERIFIED.
    """
    BASE = "base"
    VERIFIED = "verified"
    PREMIER = "premier"


def normalize_tier(tier: str | None) -> SubscriptionTier:
    """Map any stored/requested tier string onto a SubscriptionTier."""
    raw = (tier or "base").strip().lower()
    if raw == "premier":
        return SubscriptionTier.PREMIER
    if raw in ("verified", "custom"):
        return SubscriptionTier.VERIFIED
    return SubscriptionTier.BASE


TierField = Annotated[SubscriptionTier, BeforeValidator(normalize_tier)]


# Base-row fields, in column order. Each name is also the column name.
LAB_BASE_FIELDS = (
    "name",
    "lab_manager",
    "contact_email",
    "owner_user_id",
    "siret_number",
    "logo_url",
    "description_short",
    "description_long",
    "field",
    "offers_lab_space",
    "address_line1",
    "address_line2",
    "city",
    "state",
    "postal_code",
    "country",
    "website",
    "linkedin",
    "hal_structure_id",
    "hal_person_id",
    "is_verified",
    "is_visible",
    "price_privacy",
    "minimum_stay",
    "rating",
    "subscription_tier",
)

LAB_COLLECTION_FIELDS = {
    "photos",
    "partner_logos",
    "compliance",
    "compliance_docs",
    "publications",
    "patents",
    "equipment",
    "priority_equipment",
    "focus_areas",
    "offers",
}

# Columns written when a nullable-in-payload field arrives as null
LAB_COLUMN_DEFAULTS = {
    "offers_lab_space": True,
    "is_verified": False,
    "is_visible": True,
    "price_privacy": False,
    "minimum_stay": "",
    "rating": 0,
}


class LabFields(CamelModel):
    """Attributes shared by lab payloads and lab entities."""

    name: NonEmptyStr
    lab_manager: NonEmptyStr
    contact_email: str
    owner_user_id: str | None = None
    siret_number: str | None = None
    logo_url: str | None = None
    description_short: str | None = None
    description_long: str | None = None
    field: str | None = None
    offers_lab_space: bool = True
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    website: str | None = None
    linkedin: str | None = None
    hal_structure_id: str | None = None
    hal_person_id: str | None = None
    is_verified: bool = False
    is_visible: bool = True
    price_privacy: bool = False
    minimum_stay: str = ""
    rating: float = Field(default=0, ge=0, le=5)
    subscription_tier: TierField = SubscriptionTier.BASE

    photos: list[MediaAsset] = Field(default_factory=list)
    partner_logos: list[MediaAsset] = Field(default_factory=list)
    compliance: list[NonEmptyStr] = Field(default_factory=list)
    compliance_docs: list[MediaAsset] = Field(default_factory=list)
    publications: list[LinkedDocument] = Field(default_factory=list)
    patents: list[LinkedDocument] = Field(default_factory=list)
    equipment: list[NonEmptyStr] = Field(default_factory=list)
    priority_equipment: list[NonEmptyStr] = Field(default_factory=list)
    focus_areas: list[NonEmptyStr] = Field(default_factory=list)
    offers: list[OfferOption] = Field(default_factory=list)


class LabCreate(LabFields):
    """
    Payload for creating a lab.

    Stricter than the entity: the contact email must be valid, the owner
    id must be a UUID and at least one photo is required.

    Example:
        {
            "name": "Lab X",
            "labManager": "Dr. Ada Byron",
            "contactEmail": "ada@labx.org",
            "photos": [{"name": "Bench", "url": "https://cdn.glass.bio/bench.jpg"}],
            "equipment": ["Centrifuge", "PCR"],
            "priorityEquipment": ["PCR"]
        }
    """

    contact_email: EmailStr
    owner_user_id: UuidStr | None = None
    photos: list[MediaAsset] = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _null_collections(cls, data):
        return none_lists_to_empty(data, LAB_COLLECTION_FIELDS)


class LabUpdate(CamelModel):
    """
    Partial payload for updating a lab.

    Every field is optional. `model_fields_set` tells the store which base
    columns and which child collections the caller named.
    """

    name: NonEmptyStr | None = None
    lab_manager: NonEmptyStr | None = None
    contact_email: EmailStr | None = None
    owner_user_id: UuidStr | None = None
    siret_number: str | None = None
    logo_url: str | None = None
    description_short: str | None = None
    description_long: str | None = None
    field: str | None = None
    offers_lab_space: bool | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    website: str | None = None
    linkedin: str | None = None
    hal_structure_id: str | None = None
    hal_person_id: str | None = None
    is_verified: bool | None = None
    is_visible: bool | None = None
    price_privacy: bool | None = None
    minimum_stay: str | None = None
    rating: float | None = Field(default=None, ge=0, le=5)
    subscription_tier: TierField | None = None

    photos: list[MediaAsset] | None = Field(default=None, min_length=1)
    partner_logos: list[MediaAsset] | None = None
    compliance: list[NonEmptyStr] | None = None
    compliance_docs: list[MediaAsset] | None = None
    publications: list[LinkedDocument] | None = None
    patents: list[LinkedDocument] | None = None
    equipment: list[NonEmptyStr] | None = None
    priority_equipment: list[NonEmptyStr] | None = None
    focus_areas: list[NonEmptyStr] | None = None
    offers: list[OfferOption] | None = None

    @model_validator(mode="before")
    @classmethod
    def _null_collections(cls, data):
        return none_lists_to_empty(data, LAB_COLLECTION_FIELDS)

    @model_validator(mode="after")
    def _required_stay_set(self):
        reject_null_required(self, ("name", "lab_manager", "contact_email"))
        return self


class Lab(LabFields):
    """A lab as returned to clients."""

    id: PositiveId


class LabSummary(CamelModel):
    """Compact lab reference embedded in team responses."""

    id: PositiveId
    name: NonEmptyStr
    city: str | None = None
    country: str | None = None
    logo_url: str | None = None
    subscription_tier: str | None = None
