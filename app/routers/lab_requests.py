# =============================================================================
# app/routers/lab_requests.py - Lab Rental Request Endpoints
# =============================================================================
# Anyone can submit a request; only admins can list and review them.
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, status

from app.auth import AuthUser, require_admin
from app.dependencies import LabRequestStoreDep
from core.models import LabRequest

router = APIRouter()


@router.post("", response_model=LabRequest, status_code=status.HTTP_201_CREATED)
def submit_lab_request(
    store: LabRequestStoreDep,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
):
    """
    Submit a rental request for a lab.

    The request is stored as pending_review with the lab's current name.
    Returns 404 when the lab doesn't exist.
    """
    return store.create(payload)


@router.get("", response_model=list[LabRequest])
def list_lab_requests(
    store: LabRequestStoreDep,
    user: AuthUser = Depends(require_admin),
):
    """All lab requests, newest first (admin only)."""
    return store.list()


@router.patch("/{request_id}/status", response_model=LabRequest)
def update_lab_request_status(
    request_id: Annotated[int, Path(gt=0, description="Lab request id")],
    store: LabRequestStoreDep,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
    user: AuthUser = Depends(require_admin),
):
    """
    Set the review status of a request (admin only).

    Example body:
        {"status": "approved", "reviewNotes": "Bench 3 from March"}
    """
    return store.update_status(request_id, payload)
