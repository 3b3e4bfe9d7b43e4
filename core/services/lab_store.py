# =============================================================================
# core/services/lab_store.py - Lab Persistence
# =============================================================================
# Labs own nine child collections, written in this order:
#   photos -> partner logos -> compliance labels -> compliance docs ->
#   publications -> patents -> equipment -> focus areas -> offers
#
# Owner and tier sync:
# - owner_user_id is the explicit ownerUserId when given, otherwise the
#   profile whose email matches the lab's contact email
# - a lab owned by a "multi-lab" profile is always listed as verified
# =============================================================================

import logging
from typing import Any

from pydantic import BaseModel

from core.mapping import (
    document_rows,
    equipment_rows,
    lab_from_row,
    media_rows,
    value_rows,
)
from core.models.lab import (
    LAB_BASE_FIELDS,
    LAB_COLUMN_DEFAULTS,
    Lab,
    LabCreate,
    LabUpdate,
    SubscriptionTier,
    normalize_tier,
)
from core.services.child_collections import ChildCollection
from core.services.entity_store import CollectionBinding, EntityStore
from app.exceptions import StorageError
from lib.supabase_client import execute

logger = logging.getLogger(__name__)

MULTI_LAB_ROLE = "multi-lab"

LAB_SELECT = """
  id,
  name,
  lab_manager,
  contact_email,
  owner_user_id,
  siret_number,
  logo_url,
  description_short,
  description_long,
  field,
  offers_lab_space,
  address_line1,
  address_line2,
  city,
  state,
  postal_code,
  country,
  website,
  linkedin,
  hal_structure_id,
  hal_person_id,
  is_verified,
  is_visible,
  price_privacy,
  minimum_stay,
  rating,
  subscription_tier,
  lab_photos (name, url),
  lab_partner_logos (name, url),
  lab_compliance_labels (label),
  lab_compliance_docs (name, url),
  lab_publications (title, url),
  lab_patents (title, url),
  lab_equipment (item, is_priority),
  lab_focus_areas (focus_area),
  lab_offers (offer)
"""

LAB_PHOTOS = ChildCollection("lab_photos", "lab_id", ("name", "url"))
LAB_PARTNER_LOGOS = ChildCollection("lab_partner_logos", "lab_id", ("name", "url"))
LAB_COMPLIANCE_LABELS = ChildCollection("lab_compliance_labels", "lab_id", ("label",))
LAB_COMPLIANCE_DOCS = ChildCollection("lab_compliance_docs", "lab_id", ("name", "url"))
LAB_PUBLICATIONS = ChildCollection("lab_publications", "lab_id", ("title", "url"))
LAB_PATENTS = ChildCollection("lab_patents", "lab_id", ("title", "url"))
LAB_EQUIPMENT = ChildCollection("lab_equipment", "lab_id", ("item", "is_priority"))
LAB_FOCUS_AREAS = ChildCollection("lab_focus_areas", "lab_id", ("focus_area",))
LAB_OFFERS = ChildCollection("lab_offers", "lab_id", ("offer",))


class LabStore(EntityStore[Lab]):
    """
    Repository for labs.

    Usage:
        store = LabStore(SupabaseClient.get_client())
        lab = store.create(payload)
        store.update(lab.id, {"isVisible": False})   # hide from listings
    """

    table = "labs"
    entity_name = "Lab"
    select_columns = LAB_SELECT
    create_model = LabCreate
    update_model = LabUpdate
    base_fields = LAB_BASE_FIELDS
    column_defaults = LAB_COLUMN_DEFAULTS
    bindings = (
        CollectionBinding(("photos",), LAB_PHOTOS, lambda lab: media_rows(lab.photos)),
        CollectionBinding(
            ("partner_logos",), LAB_PARTNER_LOGOS, lambda lab: media_rows(lab.partner_logos)
        ),
        CollectionBinding(
            ("compliance",), LAB_COMPLIANCE_LABELS, lambda lab: value_rows(lab.compliance, "label")
        ),
        CollectionBinding(
            ("compliance_docs",), LAB_COMPLIANCE_DOCS, lambda lab: media_rows(lab.compliance_docs)
        ),
        CollectionBinding(
            ("publications",), LAB_PUBLICATIONS, lambda lab: document_rows(lab.publications)
        ),
        CollectionBinding(("patents",), LAB_PATENTS, lambda lab: document_rows(lab.patents)),
        CollectionBinding(
            ("equipment", "priority_equipment"),
            LAB_EQUIPMENT,
            lambda lab: equipment_rows(lab.equipment, lab.priority_equipment),
        ),
        CollectionBinding(
            ("focus_areas",), LAB_FOCUS_AREAS, lambda lab: value_rows(lab.focus_areas, "focus_area")
        ),
        CollectionBinding(("offers",), LAB_OFFERS, lambda lab: value_rows(lab.offers, "offer")),
    )

    def from_row(self, row: dict[str, Any]) -> Lab:
        return lab_from_row(row)

    def list_by_team(self, team_id: int) -> list[Lab]:
        """Labs linked to a team through lab_team_links."""
        links = execute(
            self.client.table("lab_team_links").select("lab_id").eq("team_id", team_id),
            "list team lab links",
            team_id=team_id,
        )
        lab_ids = [int(link["lab_id"]) for link in links if link.get("lab_id") is not None]
        return self.list_by_ids(lab_ids)

    # -------------------------------------------------------------------------
    # Owner / tier resolution
    # -------------------------------------------------------------------------

    def _profile_lookup(self, query: Any, action: str) -> dict[str, Any] | None:
        # Profile lookups only enrich the lab row; a failure means "no owner"
        try:
            rows = execute(query, action)
        except StorageError as e:
            logger.warning(f"Profile lookup failed ({action}): {e.message}")
            return None
        return rows[0] if rows else None

    def resolve_owner_user_id(
        self,
        contact_email: str | None,
        explicit: str | None = None,
    ) -> str | None:
        """
        Decide which user owns a lab.

        Args:
            contact_email: The lab's contact email
            explicit: An owner id named in the payload; wins when set

        Returns:
            The owner's user id, or None when no profile matches
        """
        if explicit:
            return explicit
        email = (contact_email or "").strip().lower()
        if not email:
            return None
        profile = self._profile_lookup(
            self.client.table("profiles").select("user_id").ilike("email", email).limit(1),
            "look up owner profile",
        )
        return profile.get("user_id") if profile else None

    def fetch_profile_role(self, user_id: str | None) -> str | None:
        """Lowercased role of a profile, or None."""
        if not user_id:
            return None
        profile = self._profile_lookup(
            self.client.table("profiles").select("role").eq("user_id", user_id).limit(1),
            "look up profile role",
        )
        role = profile.get("role") if profile else None
        return role.lower() if isinstance(role, str) else None

    def prepare_base_row(
        self,
        row: dict[str, Any],
        payload: BaseModel,
        existing: Lab | None,
    ) -> dict[str, Any]:
        """
        Fill owner_user_id and subscription_tier.

        Both are re-derived on every create and every non-empty update so
        the lab mirrors its owner's profile.
        """
        named = payload.model_fields_set

        if existing is None:
            contact_email = payload.contact_email
            requested_owner = payload.owner_user_id
            requested_tier = payload.subscription_tier
        else:
            contact_email = (
                payload.contact_email if "contact_email" in named else existing.contact_email
            )
            requested_owner = (
                payload.owner_user_id if "owner_user_id" in named else None
            ) or existing.owner_user_id
            requested_tier = (
                payload.subscription_tier if "subscription_tier" in named else existing.subscription_tier
            )

        owner_user_id = self.resolve_owner_user_id(contact_email, requested_owner)
        role = self.fetch_profile_role(owner_user_id)

        if role == MULTI_LAB_ROLE:
            tier = SubscriptionTier.VERIFIED
        else:
            tier = normalize_tier(requested_tier.value if requested_tier else None)

        row["owner_user_id"] = owner_user_id
        row["subscription_tier"] = tier.value
        return row
