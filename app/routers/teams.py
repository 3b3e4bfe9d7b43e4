# =============================================================================
# app/routers/teams.py - Team Endpoints
# =============================================================================
# Reads are public; hidden teams are only visible to admins.
# Any authenticated user can create a team and becomes its owner unless the
# payload names one. Updates and deletes require the owner or an admin.
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, Response, status

from app.auth import AuthUser, get_current_user, get_current_user_optional
from app.dependencies import LabStoreDep, TeamStoreDep
from app.exceptions import ForbiddenError, NotFoundError
from core.models import Lab, Team

router = APIRouter()

TeamId = Annotated[int, Path(gt=0, description="Team id")]


def _is_admin(user: AuthUser | None) -> bool:
    return user is not None and user.is_admin


def _visible_team(store: TeamStoreDep, team_id: int, user: AuthUser | None) -> Team:
    team = store.get(team_id)
    if not team.is_visible and not _is_admin(user):
        raise NotFoundError("Team", team_id)
    return team


# =============================================================================
# Reads
# =============================================================================

@router.get("", response_model=list[Team])
def list_teams(
    store: TeamStoreDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    List teams.

    Admins see every team; everyone else sees visible teams only.
    """
    if _is_admin(user):
        return store.list()
    return store.list_visible()


@router.get("/mine", response_model=list[Team])
def list_my_teams(
    store: TeamStoreDep,
    user: AuthUser = Depends(get_current_user),
):
    """Teams owned by the authenticated user, hidden ones included."""
    return store.list_by_owner(str(user.id))


@router.get("/{team_id}", response_model=Team)
def get_team(
    team_id: TeamId,
    store: TeamStoreDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """Get one team with members, photos, equipment, techniques and lab links."""
    return _visible_team(store, team_id, user)


@router.get("/{team_id}/labs", response_model=list[Lab])
def list_team_labs(
    team_id: TeamId,
    store: TeamStoreDep,
    lab_store: LabStoreDep,
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """Labs a team is linked to."""
    _visible_team(store, team_id, user)
    labs = lab_store.list_by_team(team_id)
    if _is_admin(user):
        return labs
    return [lab for lab in labs if lab.is_visible]


# =============================================================================
# Writes
# =============================================================================

@router.post("", response_model=Team, status_code=status.HTTP_201_CREATED)
def create_team(
    store: TeamStoreDep,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Create a team with all of its child collections."""
    payload = dict(payload or {})
    if not payload.get("ownerUserId") and not payload.get("owner_user_id"):
        payload["ownerUserId"] = str(user.id)
    return store.create(payload)


@router.api_route("/{team_id}", methods=["PUT", "PATCH"], response_model=Team)
def update_team(
    team_id: TeamId,
    store: TeamStoreDep,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Partially update a team.

    Only the keys present in the body are written; `{"members": []}` clears
    the members and leaves everything else alone.
    """
    existing = store.get(team_id)
    if not user.can_manage(existing.owner_user_id):
        raise ForbiddenError("Only the team owner or an admin can edit this team")
    return store.update(team_id, payload)


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_team(
    team_id: TeamId,
    store: TeamStoreDep,
    user: AuthUser = Depends(get_current_user),
):
    """Delete a team. Members, photos and lab links are removed with it."""
    existing = store.get(team_id)
    if not user.can_manage(existing.owner_user_id):
        raise ForbiddenError("Only the team owner or an admin can delete this team")
    store.delete(team_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
