# =============================================================================
# core/services/lab_request_store.py - Lab Rental Requests
# =============================================================================
# Flat records (no child collections). A request is stamped with the target
# lab's name when it is submitted, so later lab renames don't rewrite history.
#
# Usage:
#   store = LabRequestStore(client)
#   request = store.create(payload)           # pending_review
#   store.update_status(request.id, {"status": "approved"})
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from app.exceptions import NotFoundError, RowMappingError, StorageError
from core.models.lab_request import (
    LabRequest,
    LabRequestCreate,
    LabRequestStatus,
    LabRequestStatusUpdate,
)
from core.validation import parse_payload
from lib.supabase_client import execute

logger = logging.getLogger(__name__)


def lab_name_for(client: Any, lab_id: int) -> str:
    """
    Name of an existing lab.

    Raises:
        NotFoundError: If no lab has this id
    """
    rows = execute(
        client.table("labs").select("id, name").eq("id", lab_id).limit(1),
        "fetch lab",
        id=lab_id,
    )
    if not rows:
        raise NotFoundError("Lab", lab_id)
    return rows[0].get("name") or ""


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class LabRequestStore:
    """Repository for lab_requests."""

    table = "lab_requests"

    def __init__(self, client: Any):
        self.client = client

    def _from_row(self, row: dict[str, Any]) -> LabRequest:
        data = dict(row)
        data["review_notes"] = row.get("review_notes") or ""
        data["preferred_contact_methods"] = row.get("preferred_contact_methods") or ["email"]
        for key in ("equipment_needs", "compliance_notes", "special_requirements", "references_or_links"):
            data[key] = row.get(key) or ""
        try:
            return LabRequest.model_validate(data)
        except ValueError as e:
            raise RowMappingError(self.table, row.get("id"), str(e)) from e

    def create(self, payload: Any) -> LabRequest:
        """
        Submit a request for a lab.

        Raises:
            ValidationError: If the payload is invalid
            NotFoundError: If the lab doesn't exist
            StorageError: If the insert fails
        """
        data = parse_payload(LabRequestCreate, payload)
        lab_name = lab_name_for(self.client, data.lab_id)

        row = data.model_dump(mode="json", by_alias=False)
        row.update({
            "lab_name": lab_name,
            "status": LabRequestStatus.PENDING_REVIEW.value,
            "submitted_at": _utc_now(),
        })

        inserted = execute(self.client.table(self.table).insert(row), "insert lab request")
        if not inserted:
            raise StorageError("insert lab request", "Insert returned no row")

        request = self._from_row(inserted[0])
        logger.info(f"Lab request {request.id} submitted for lab {data.lab_id}")
        return request

    def list(self) -> list[LabRequest]:
        """All requests, newest first."""
        rows = execute(
            self.client.table(self.table).select("*").order("id", desc=True),
            "list lab requests",
        )
        return [self._from_row(row) for row in rows]

    def update_status(self, request_id: int, payload: Any) -> LabRequest:
        """
        Move a request to a new review status.

        reviewed_at is stamped for every status except pending_review, which
        clears it.

        Raises:
            ValidationError: If the status is not recognized
            NotFoundError: If the request doesn't exist
        """
        data = parse_payload(LabRequestStatusUpdate, payload)

        updates: dict[str, Any] = {
            "status": data.status.value,
            "reviewed_at": None if data.status == LabRequestStatus.PENDING_REVIEW else _utc_now(),
        }
        if data.review_notes is not None:
            updates["review_notes"] = data.review_notes

        rows = execute(
            self.client.table(self.table).update(updates).eq("id", request_id),
            "update lab request status",
            id=request_id,
        )
        if not rows:
            raise NotFoundError("Lab request", request_id)

        logger.info(f"Lab request {request_id} -> {data.status.value}")
        return self._from_row(rows[0])
