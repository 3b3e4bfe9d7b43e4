# =============================================================================
# core/models/lab_request.py - Lab Rental Request Schemas
# =============================================================================
# A lab request is a prospective renter asking for time in a listed lab.
# Requests enter as pending_review and are moved through review by admins:
#
#   pending_review -> approved -> sent
#                  -> rejected
#
# Transitions are not guarded; any status may be set by an admin.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import EmailStr, Field

from .common import CamelModel, NonEmptyStr, PositiveId


class LabRequestStatus(str, Enum):
    """Review state of a lab request."""
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    SENT = "sent"
    REJECTED = "rejected"


class ContactMethod(str, Enum):
    """How the requester prefers to be contacted."""
    EMAIL = "email"
    VIDEO_CALL = "video_call"
    PHONE = "phone"


class LabRequestCreate(CamelModel):
    """Payload for POST /lab-requests."""

    lab_id: PositiveId
    requester_name: NonEmptyStr
    requester_email: EmailStr
    organization: str = Field(..., min_length=2)
    role_title: str = Field(..., min_length=2)
    project_summary: str = Field(..., min_length=50)
    work_timeline: NonEmptyStr
    weekly_hours_needed: NonEmptyStr
    team_size: NonEmptyStr
    equipment_needs: str = ""
    compliance_notes: str = ""
    special_requirements: str = ""
    references_or_links: str = ""
    preferred_contact_methods: list[ContactMethod] = Field(
        default_factory=lambda: [ContactMethod.EMAIL], min_length=1
    )


class LabRequestStatusUpdate(CamelModel):
    """Payload for PATCH /lab-requests/{id}/status."""

    status: LabRequestStatus
    review_notes: str | None = None


class LabRequest(LabRequestCreate):
    """A stored lab request."""

    id: PositiveId
    lab_name: NonEmptyStr
    requester_email: str
    project_summary: str
    status: LabRequestStatus = LabRequestStatus.PENDING_REVIEW
    submitted_at: datetime
    reviewed_at: datetime | None = None
    review_notes: str = ""
