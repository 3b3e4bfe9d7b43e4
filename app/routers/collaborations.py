# =============================================================================
# app/routers/collaborations.py - Lab Collaboration Endpoints
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Body, status

from app.dependencies import CollaborationStoreDep
from core.models import LabCollaboration

router = APIRouter()


@router.post("", response_model=LabCollaboration, status_code=status.HTTP_201_CREATED)
def submit_collaboration(
    store: CollaborationStoreDep,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
):
    """Record a collaboration enquiry for a lab. Returns 404 when the lab doesn't exist."""
    return store.create(payload)
