# =============================================================================
# app/routers/labs.py - Lab Endpoints
# =============================================================================
# Reads are public; hidden labs are only visible to admins.
# Writes require authentication; updates and deletes require the lab's owner
# or an admin.
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, Response, status

from app.auth import AuthUser, get_current_user, get_current_user_optional
from app.dependencies import LabStoreDep, TeamStoreDep
from app.exceptions import ForbiddenError, NotFoundError
from core.models import Lab, Team

router = APIRouter()

LabId = Annotated[int, Path(gt=0, description="Lab id")]

# Verification and tier are granted by admins (or by the owner's profile),
# never by the lab owner
ADMIN_ONLY_FIELDS = ("isVerified", "is_verified", "subscriptionTier", "subscription_tier")


def _is_admin(user: AuthUser | None) -> bool:
    return user is not None and user.is_admin


def _visible_lab(store: LabStoreDep, lab_id: int, user: AuthUser | None) -> Lab:
    lab = store.get(lab_id)
    if not lab.is_visible and not _is_admin(user):
        raise NotFoundError("Lab", lab_id)
    return lab


def _check_admin_only_fields(payload: dict[str, Any] | None, user: AuthUser) -> None:
    if user.is_admin or not isinstance(payload, dict):
        return
    named = [field for field in ADMIN_ONLY_FIELDS if field in payload]
    if named:
        raise ForbiddenError(f"Only an admin can set {', '.join(named)}")


# =============================================================================
# Reads
# =============================================================================

@router.get("", response_model=list[Lab])
def list_labs(
    store: LabStoreDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    List labs.

    Admins see every lab; everyone else sees visible labs only.
    """
    if _is_admin(user):
        return store.list()
    return store.list_visible()


@router.get("/mine", response_model=list[Lab])
def list_my_labs(
    store: LabStoreDep,
    user: AuthUser = Depends(get_current_user),
):
    """Labs owned by the authenticated user, hidden ones included."""
    return store.list_by_owner(str(user.id))


@router.get("/{lab_id}", response_model=Lab)
def get_lab(
    lab_id: LabId,
    store: LabStoreDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """Get one lab with every child collection."""
    return _visible_lab(store, lab_id, user)


@router.get("/{lab_id}/teams", response_model=list[Team])
def list_lab_teams(
    lab_id: LabId,
    store: LabStoreDep,
    team_store: TeamStoreDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """Teams linked to a lab."""
    _visible_lab(store, lab_id, user)
    teams = team_store.list_by_lab(lab_id)
    if _is_admin(user):
        return teams
    return [team for team in teams if team.is_visible]


# =============================================================================
# Writes
# =============================================================================

@router.post("", response_model=Lab, status_code=status.HTTP_201_CREATED)
def create_lab(
    store: LabStoreDep,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a lab with all of its child collections.

    The owner is the explicit ownerUserId, or the user whose profile email
    matches contactEmail.
    """
    _check_admin_only_fields(payload, user)
    return store.create(payload)


@router.api_route("/{lab_id}", methods=["PUT", "PATCH"], response_model=Lab)
def update_lab(
    lab_id: LabId,
    store: LabStoreDep,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Partially update a lab.

    Only the keys present in the body are written; a collection key
    replaces that whole collection.
    """
    existing = store.get(lab_id)
    if not user.can_manage(existing.owner_user_id):
        raise ForbiddenError("Only the lab owner or an admin can edit this lab")
    _check_admin_only_fields(payload, user)
    return store.update(lab_id, payload)


@router.delete("/{lab_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lab(
    lab_id: LabId,
    store: LabStoreDep,
    user: AuthUser = Depends(get_current_user),
):
    """Delete a lab. Child rows are removed with it."""
    existing = store.get(lab_id)
    if not user.can_manage(existing.owner_user_id):
        raise ForbiddenError("Only the lab owner or an admin can delete this lab")
    store.delete(lab_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
