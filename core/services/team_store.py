# =============================================================================
# core/services/team_store.py - Team Persistence
# =============================================================================
# Teams own six child collections, written in this order:
#   members -> photos -> equipment -> techniques -> focus areas -> lab links
#
# Lab links live in the lab_team_links join table, which also backs
# LabStore.list_by_team().
# =============================================================================

import logging
from typing import Any

from core.mapping import (
    equipment_rows,
    media_rows,
    member_rows,
    team_from_row,
    technique_rows,
    value_rows,
)
from core.models.team import (
    TEAM_BASE_FIELDS,
    TEAM_COLUMN_DEFAULTS,
    Team,
    TeamCreate,
    TeamUpdate,
)
from core.services.child_collections import ChildCollection
from core.services.entity_store import CollectionBinding, EntityStore
from lib.supabase_client import execute

logger = logging.getLogger(__name__)

TEAM_SELECT = """
  id,
  name,
  description_short,
  description_long,
  owner_user_id,
  logo_url,
  website,
  linkedin,
  field,
  is_visible,
  created_at,
  team_members (id, name, role, email, linkedin, website, is_lead),
  team_photos (name, url),
  team_equipment (item, is_priority),
  team_techniques (name, description),
  team_focus_areas (focus_area),
  lab_team_links (lab_id, labs (id, name, city, country, logo_url, subscription_tier))
"""

TEAM_MEMBERS = ChildCollection(
    "team_members", "team_id", ("name", "role", "email", "linkedin", "website", "is_lead")
)
TEAM_PHOTOS = ChildCollection("team_photos", "team_id", ("name", "url"))
TEAM_EQUIPMENT = ChildCollection("team_equipment", "team_id", ("item", "is_priority"))
TEAM_TECHNIQUES = ChildCollection("team_techniques", "team_id", ("name", "description"))
TEAM_FOCUS_AREAS = ChildCollection("team_focus_areas", "team_id", ("focus_area",))
TEAM_LAB_LINKS = ChildCollection("lab_team_links", "team_id", ("lab_id",))


class TeamStore(EntityStore[Team]):
    """
    Repository for teams.

    Usage:
        store = TeamStore(SupabaseClient.get_client())
        team = store.create({"name": "Folding Group", "members": [...]})
        store.update(team.id, {"members": []})   # clears members only
    """

    table = "teams"
    entity_name = "Team"
    select_columns = TEAM_SELECT
    create_model = TeamCreate
    update_model = TeamUpdate
    base_fields = TEAM_BASE_FIELDS
    column_defaults = TEAM_COLUMN_DEFAULTS
    bindings = (
        CollectionBinding(("members",), TEAM_MEMBERS, lambda t: member_rows(t.members)),
        CollectionBinding(("photos",), TEAM_PHOTOS, lambda t: media_rows(t.photos)),
        CollectionBinding(
            ("equipment", "priority_equipment"),
            TEAM_EQUIPMENT,
            lambda t: equipment_rows(t.equipment, t.priority_equipment),
        ),
        CollectionBinding(("techniques",), TEAM_TECHNIQUES, lambda t: technique_rows(t.techniques)),
        CollectionBinding(
            ("focus_areas",), TEAM_FOCUS_AREAS, lambda t: value_rows(t.focus_areas, "focus_area")
        ),
        CollectionBinding(
            ("lab_ids",),
            TEAM_LAB_LINKS,
            lambda t: [{"lab_id": lab_id} for lab_id in dict.fromkeys(t.lab_ids)],
        ),
    )

    def from_row(self, row: dict[str, Any]) -> Team:
        return team_from_row(row)

    def list_by_lab(self, lab_id: int) -> list[Team]:
        """
        Teams linked to a lab through lab_team_links.

        Each team comes back with all of its lab links, not only this one.
        """
        links = execute(
            self.client.table(TEAM_LAB_LINKS.table).select("team_id").eq("lab_id", lab_id),
            "list lab team links",
            lab_id=lab_id,
        )
        team_ids = [int(link["team_id"]) for link in links if link.get("team_id") is not None]
        return self.list_by_ids(team_ids)
