# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database. `is_admin` is resolved from the token's
    role claims and the ADMIN_USER_IDS setting.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None
    role: Optional[str] = None
    is_admin: bool = False

    def owns(self, owner_user_id: Optional[str]) -> bool:
        """True when this user is the given owner."""
        return bool(owner_user_id) and str(owner_user_id).lower() == str(self.id).lower()

    def can_manage(self, owner_user_id: Optional[str]) -> bool:
        """Admins manage everything; other users manage what they own."""
        return self.is_admin or self.owns(owner_user_id)
