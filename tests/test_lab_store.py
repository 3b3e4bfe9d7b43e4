# =============================================================================
# tests/test_lab_store.py - LabStore Tests
# =============================================================================
# Tests for lab persistence:
# - create -> find round trip with all nine child collections
# - partial updates and priority equipment
# - owner resolution from profiles and the multi-lab tier rule
# - labs linked to a team
#
# Run with: pytest tests/test_lab_store.py -v
# =============================================================================

import uuid

import pytest

from app.exceptions import NotFoundError, ValidationError
from core.models import OfferOption, SubscriptionTier


class TestCreate:
    """Tests for LabStore.create."""

    def test_round_trip(self, lab_store, lab_payload):
        created = lab_store.create(lab_payload)

        found = lab_store.find_by_id(created.id)

        assert found == created
        assert found.lab_manager == "Dr. Ada Byron"
        assert [p.name for p in found.photos] == ["Bench"]
        assert [p.name for p in found.partner_logos] == ["Partner"]
        assert found.compliance == ["ISO 9001"]
        assert [d.name for d in found.compliance_docs] == ["ISO cert"]
        assert [p.title for p in found.publications] == ["Folding at scale"]
        assert found.patents == []
        assert found.equipment == ["Centrifuge", "PCR"]
        assert found.priority_equipment == ["PCR"]
        assert found.focus_areas == ["Genomics"]
        assert found.offers == [OfferOption.MONTHLY_RENT, OfferOption.DAY_RATE]

    def test_collections_written_in_order(self, lab_store, fake_db, lab_payload):
        lab_store.create(lab_payload)

        cleared = [call.table for call in fake_db.calls if call.op == "delete"]
        assert cleared == [
            "lab_photos",
            "lab_partner_logos",
            "lab_compliance_labels",
            "lab_compliance_docs",
            "lab_publications",
            "lab_patents",
            "lab_equipment",
            "lab_focus_areas",
            "lab_offers",
        ]

    def test_column_defaults(self, lab_store, lab_payload):
        lab = lab_store.create(lab_payload)

        assert lab.is_visible is True
        assert lab.is_verified is False
        assert lab.minimum_stay == ""
        assert lab.rating == 0
        assert lab.subscription_tier == SubscriptionTier.BASE

    def test_missing_photo_rejected(self, lab_store, fake_db, lab_payload):
        del lab_payload["photos"]

        with pytest.raises(ValidationError) as exc_info:
            lab_store.create(lab_payload)

        assert exc_info.value.field == "photos"
        assert fake_db.rows("labs") == []


class TestOwnerResolution:
    """Owner and tier are derived from profiles."""

    def test_owner_found_by_contact_email(self, lab_store, fake_db, lab_payload):
        owner = str(uuid.uuid4())
        fake_db.seed("profiles", [{"user_id": owner, "email": "ADA@LabX.org", "role": "lab"}])

        lab = lab_store.create(lab_payload)

        assert lab.owner_user_id == owner
        assert lab.subscription_tier == SubscriptionTier.BASE

    def test_explicit_owner_wins(self, lab_store, fake_db, lab_payload):
        explicit = str(uuid.uuid4())
        fake_db.seed("profiles", [{"user_id": str(uuid.uuid4()), "email": "ada@labx.org"}])

        lab = lab_store.create({**lab_payload, "ownerUserId": explicit})

        assert lab.owner_user_id == explicit

    def test_multi_lab_owner_forces_verified(self, lab_store, fake_db, lab_payload):
        owner = str(uuid.uuid4())
        fake_db.seed("profiles", [{"user_id": owner, "email": "ada@labx.org", "role": "Multi-Lab"}])

        lab = lab_store.create({**lab_payload, "subscriptionTier": "premier"})

        assert lab.subscription_tier == SubscriptionTier.VERIFIED

    def test_requested_tier_kept_for_regular_owner(self, lab_store, lab_payload):
        lab = lab_store.create({**lab_payload, "subscriptionTier": "premier"})

        assert lab.subscription_tier == SubscriptionTier.PREMIER

    def test_profile_lookup_failure_means_no_owner(self, lab_store, fake_db, lab_payload):
        fake_db.seed("profiles", [{"user_id": str(uuid.uuid4()), "email": "ada@labx.org"}])
        fake_db.fail("select", "profiles")

        lab = lab_store.create(lab_payload)

        assert lab.owner_user_id is None

    def test_update_keeps_existing_owner(self, lab_store, lab_payload):
        owner = str(uuid.uuid4())
        lab = lab_store.create({**lab_payload, "ownerUserId": owner})

        updated = lab_store.update(lab.id, {"contactEmail": "new@labx.org"})

        assert updated.owner_user_id == owner
        assert updated.contact_email == "new@labx.org"


@pytest.fixture
def lab(lab_store, lab_payload):
    return lab_store.create(lab_payload)


class TestUpdate:
    """Tests for LabStore.update."""

    def test_priority_equipment_only(self, lab_store, lab):
        updated = lab_store.update(lab.id, {"priorityEquipment": ["Centrifuge"]})

        assert updated.equipment == ["Centrifuge", "PCR"]
        assert updated.priority_equipment == ["Centrifuge"]

    def test_visibility_only(self, lab_store, fake_db, lab):
        fake_db.reset_calls()

        updated = lab_store.update(lab.id, {"isVisible": False})

        assert updated.is_visible is False
        assert updated.photos == lab.photos
        assert updated.offers == lab.offers
        assert [c for c in fake_db.calls if c.op in ("insert", "delete")] == []

    def test_clear_partner_logos(self, lab_store, lab):
        updated = lab_store.update(lab.id, {"partnerLogos": []})

        assert updated.partner_logos == []
        assert updated.compliance == lab.compliance

    def test_photos_cannot_be_emptied(self, lab_store, lab):
        with pytest.raises(ValidationError):
            lab_store.update(lab.id, {"photos": []})

    def test_empty_patch_is_a_no_op(self, lab_store, fake_db, lab):
        fake_db.reset_calls()

        assert lab_store.update(lab.id, {}) == lab
        assert {call.op for call in fake_db.calls} == {"select"}

    def test_missing_lab(self, lab_store):
        with pytest.raises(NotFoundError):
            lab_store.update(999, {"name": "Ghost"})


class TestLinkedTeams:
    """Tests for LabStore.list_by_team."""

    def test_labs_for_team(self, lab_store, team_store, lab):
        other = lab_store.create({
            "name": "Lab Z",
            "labManager": "Dr. Z",
            "contactEmail": "z@labz.org",
            "photos": [{"name": "Z", "url": "https://cdn.glass.bio/z.jpg"}],
        })
        team = team_store.create({"name": "Linked", "labIds": [lab.id]})

        labs = lab_store.list_by_team(team.id)

        assert [found.id for found in labs] == [lab.id]
        assert other.id not in [found.id for found in labs]

    def test_team_without_links(self, lab_store, team_store):
        team = team_store.create({"name": "Alone"})

        assert lab_store.list_by_team(team.id) == []
