# =============================================================================
# core/models/team.py - Team Schemas
# =============================================================================
# These models define the API contract for research teams:
# - TeamMember / TeamTechnique: child items owned by a team
# - TeamCreate: full payload for POST /teams
# - TeamUpdate: partial payload for PUT/PATCH /teams/{id}
# - Team: the entity returned to clients, with linked lab summaries
#
# Rules enforced here rather than in storage:
# - At most one member may be flagged as lead
# - At most three equipment items may be flagged as priority
# - At most two team photos
# =============================================================================

from pydantic import EmailStr, Field, model_validator

from .common import (
    CamelModel,
    MediaAsset,
    NonEmptyStr,
    NormalizedUrl,
    PositiveId,
    UrlStr,
    UuidStr,
    none_lists_to_empty,
    reject_null_required,
)
from .lab import LabSummary

MAX_PRIORITY_EQUIPMENT = 3
MAX_TEAM_PHOTOS = 2

TEAM_BASE_FIELDS = (
    "name",
    "description_short",
    "description_long",
    "owner_user_id",
    "logo_url",
    "website",
    "linkedin",
    "field",
    "is_visible",
)

TEAM_COLLECTION_FIELDS = {
    "members",
    "photos",
    "equipment",
    "priority_equipment",
    "techniques",
    "focus_areas",
    "lab_ids",
}

TEAM_COLUMN_DEFAULTS = {
    "is_visible": True,
}


class TeamMember(CamelModel):
    """
    A person listed on a team page.

    `id` is assigned by storage and only appears in responses; members are
    always rewritten as a whole list.
    """

    id: PositiveId | None = None
    name: NonEmptyStr
    role: NonEmptyStr
    email: EmailStr | None = None
    linkedin: UrlStr | None = None
    website: UrlStr | None = None
    is_lead: bool = False


class TeamTechnique(CamelModel):
    """A technique the team masters, with an optional description."""

    name: NonEmptyStr
    description: str | None = Field(default=None, min_length=1, max_length=2000)


def ensure_single_lead(members: list[TeamMember] | None) -> None:
    """
    Reject member lists with more than one lead.

    Raises:
        ValueError: If two or more members have is_lead set
    """
    if not members:
        return
    leads = [member.name for member in members if member.is_lead]
    if len(leads) > 1:
        raise ValueError(
            f"Only one team member can be marked as lead (got {len(leads)}: {', '.join(leads)})"
        )


class TeamCreate(CamelModel):
    """
    Payload for creating a team.

    Example:
        {
            "name": "Protein Folding Group",
            "website": "folding.example.org",
            "equipment": ["Centrifuge", "PCR"],
            "priorityEquipment": ["PCR"],
            "members": [{"name": "Ada", "role": "PI", "isLead": true}],
            "labIds": [3]
        }
    """

    name: NonEmptyStr
    description_short: str | None = Field(default=None, max_length=350)
    description_long: str | None = Field(default=None, max_length=8000)
    owner_user_id: UuidStr | None = None
    logo_url: UrlStr | None = None
    website: NormalizedUrl = None
    linkedin: UrlStr | None = None
    field: NonEmptyStr | None = None
    is_visible: bool = True

    equipment: list[NonEmptyStr] = Field(default_factory=list)
    priority_equipment: list[NonEmptyStr] = Field(
        default_factory=list, max_length=MAX_PRIORITY_EQUIPMENT
    )
    techniques: list[TeamTechnique] = Field(default_factory=list)
    focus_areas: list[NonEmptyStr] = Field(default_factory=list)
    members: list[TeamMember] = Field(default_factory=list)
    lab_ids: list[PositiveId] = Field(default_factory=list)
    photos: list[MediaAsset] = Field(default_factory=list, max_length=MAX_TEAM_PHOTOS)

    @model_validator(mode="before")
    @classmethod
    def _null_collections(cls, data):
        return none_lists_to_empty(data, TEAM_COLLECTION_FIELDS)

    @model_validator(mode="after")
    def _single_lead(self):
        ensure_single_lead(self.members)
        return self


class TeamUpdate(CamelModel):
    """
    Partial payload for updating a team.

    Only keys present in the request are applied. An explicit empty list
    clears that collection; an absent key leaves it untouched.
    """

    name: NonEmptyStr | None = None
    description_short: str | None = Field(default=None, max_length=350)
    description_long: str | None = Field(default=None, max_length=8000)
    owner_user_id: UuidStr | None = None
    logo_url: UrlStr | None = None
    website: NormalizedUrl = None
    linkedin: UrlStr | None = None
    field: NonEmptyStr | None = None
    is_visible: bool | None = None

    equipment: list[NonEmptyStr] | None = None
    priority_equipment: list[NonEmptyStr] | None = Field(
        default=None, max_length=MAX_PRIORITY_EQUIPMENT
    )
    techniques: list[TeamTechnique] | None = None
    focus_areas: list[NonEmptyStr] | None = None
    members: list[TeamMember] | None = None
    lab_ids: list[PositiveId] | None = None
    photos: list[MediaAsset] | None = Field(default=None, max_length=MAX_TEAM_PHOTOS)

    @model_validator(mode="before")
    @classmethod
    def _null_collections(cls, data):
        return none_lists_to_empty(data, TEAM_COLLECTION_FIELDS)

    @model_validator(mode="after")
    def _check_patch(self):
        reject_null_required(self, ("name",))
        ensure_single_lead(self.members)
        return self


class Team(CamelModel):
    """A team as returned to clients."""

    id: PositiveId
    name: NonEmptyStr
    description_short: str | None = None
    description_long: str | None = None
    owner_user_id: str | None = None
    logo_url: str | None = None
    website: str | None = None
    linkedin: str | None = None
    field: str | None = None
    is_visible: bool = True

    equipment: list[str] = Field(default_factory=list)
    priority_equipment: list[str] = Field(default_factory=list)
    techniques: list[TeamTechnique] = Field(default_factory=list)
    focus_areas: list[str] = Field(default_factory=list)
    members: list[TeamMember] = Field(default_factory=list)
    lab_ids: list[int] = Field(default_factory=list)
    labs: list[LabSummary] = Field(default_factory=list)
    photos: list[MediaAsset] = Field(default_factory=list)
