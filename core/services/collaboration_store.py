# =============================================================================
# core/services/collaboration_store.py - Lab Collaboration Enquiries
# =============================================================================

import logging
from typing import Any

from app.exceptions import StorageError
from core.models.collaboration import LabCollaboration, LabCollaborationCreate
from core.services.lab_request_store import lab_name_for
from core.validation import parse_payload
from lib.supabase_client import execute

logger = logging.getLogger(__name__)


class CollaborationStore:
    """Repository for lab_collaborations."""

    table = "lab_collaborations"

    def __init__(self, client: Any):
        self.client = client

    def create(self, payload: Any) -> LabCollaboration:
        """
        Record a collaboration enquiry for a lab.

        Raises:
            ValidationError: If the payload is invalid
            NotFoundError: If the lab doesn't exist
            StorageError: If the insert fails
        """
        data = parse_payload(LabCollaborationCreate, payload)
        lab_name = lab_name_for(self.client, data.lab_id)

        row = data.model_dump(mode="json", by_alias=False)
        row["lab_name"] = lab_name

        inserted = execute(self.client.table(self.table).insert(row), "insert lab collaboration")
        if not inserted:
            raise StorageError("insert lab collaboration", "Insert returned no row")

        logger.info(f"Collaboration enquiry {inserted[0].get('id')} recorded for lab {data.lab_id}")
        return LabCollaboration.model_validate(inserted[0])
