# =============================================================================
# core/models/collaboration.py - Lab Collaboration Schemas
# =============================================================================
# A collaboration enquiry from another lab or team. The payload names the
# target lab by id; the store records the lab's name next to the enquiry.
# =============================================================================

from datetime import datetime

from pydantic import EmailStr

from .common import CamelModel, NonEmptyStr, PositiveId


class LabCollaborationCreate(CamelModel):
    """Payload for POST /lab-collaborations."""

    lab_id: PositiveId
    contact_name: NonEmptyStr
    contact_email: EmailStr
    target_labs: str = ""
    collaboration_focus: NonEmptyStr
    resources_offered: str = ""
    desired_timeline: str = ""
    additional_notes: str = ""


class LabCollaboration(CamelModel):
    """A stored collaboration enquiry."""

    id: PositiveId
    lab_name: str
    contact_name: str
    contact_email: str
    target_labs: str = ""
    collaboration_focus: str
    resources_offered: str = ""
    desired_timeline: str = ""
    additional_notes: str = ""
    created_at: datetime | None = None
