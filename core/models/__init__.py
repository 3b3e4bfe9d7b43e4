# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - common.py: camelCase base model, shared field types, media items
# - lab.py: Lab create/update payloads and the Lab entity
# - team.py: Team create/update payloads and the Team entity
# - lab_request.py: Lab rental requests and their review status
# - collaboration.py: Lab collaboration enquiries
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Shared building blocks
# -----------------------------------------------------------------------------
from .common import (
    CamelModel,
    LinkedDocument,
    MediaAsset,
    normalize_url,
)

# -----------------------------------------------------------------------------
# Lab Models
# -----------------------------------------------------------------------------
from .lab import (
    Lab,
    LabCreate,
    LabSummary,
    LabUpdate,
    OfferOption,
    SubscriptionTier,
    normalize_tier,
)

# -----------------------------------------------------------------------------
# Team Models
# -----------------------------------------------------------------------------
from .team import (
    Team,
    TeamCreate,
    TeamMember,
    TeamTechnique,
    TeamUpdate,
)

# -----------------------------------------------------------------------------
# Lab Request / Collaboration Models
# -----------------------------------------------------------------------------
from .lab_request import (
    ContactMethod,
    LabRequest,
    LabRequestCreate,
    LabRequestStatus,
    LabRequestStatusUpdate,
)
from .collaboration import (
    LabCollaboration,
    LabCollaborationCreate,
)

__all__ = [
    # Common
    "CamelModel",
    "LinkedDocument",
    "MediaAsset",
    "normalize_url",
    # Lab
    "Lab",
    "LabCreate",
    "LabSummary",
    "LabUpdate",
    "OfferOption",
    "SubscriptionTier",
    "normalize_tier",
    # Team
    "Team",
    "TeamCreate",
    "TeamMember",
    "TeamTechnique",
    "TeamUpdate",
    # Lab requests
    "ContactMethod",
    "LabRequest",
    "LabRequestCreate",
    "LabRequestStatus",
    "LabRequestStatusUpdate",
    # Collaborations
    "LabCollaboration",
    "LabCollaborationCreate",
]
