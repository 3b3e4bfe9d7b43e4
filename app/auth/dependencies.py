# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Supports both:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret), only when SUPABASE_JWT_SECRET is set
#
# Admin privilege comes from the token (app_metadata.role or
# user_metadata.role equal to "admin") or from the ADMIN_USER_IDS setting.
#
# Usage:
#   from app.auth import get_current_user, require_admin, AuthUser
#
#   @router.delete("/{lab_id}")
#   async def delete(lab_id: int, user: AuthUser = Depends(require_admin)):
#       ...
# =============================================================================

import logging
import time
from typing import Any, Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser
from app.exceptions import ForbiddenError

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

# HTTP Bearer token extractor
security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _get_jwks_url() -> str:
    """Get the JWKS URL from Supabase URL."""
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Stale keys beat no keys
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _legacy_secret() -> tuple[str, str]:
    """
    The HS256 secret and algorithm.

    Raises:
        JWTError: If SUPABASE_JWT_SECRET is not configured
    """
    if not settings.SUPABASE_JWT_SECRET:
        raise JWTError("HS256 tokens are not accepted: SUPABASE_JWT_SECRET is not set")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def _get_signing_key(token: str) -> tuple[Any, str]:
    """
    Get the appropriate signing key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification

    Raises:
        JWTError: If no usable key exists for the token
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        return _legacy_secret()

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        return _legacy_secret()

    if kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return _legacy_secret()


def _token_role(payload: dict[str, Any]) -> Optional[str]:
    """Role claim from app_metadata, then user_metadata."""
    for claim in ("app_metadata", "user_metadata"):
        metadata = payload.get(claim) or {}
        if isinstance(metadata, dict) and isinstance(metadata.get("role"), str):
            return metadata["role"].lower()
    return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def user_from_token(token: str) -> AuthUser:
    """
    Verify a Supabase JWT and build the AuthUser it describes.

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no user id
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience="authenticated"
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    role = _token_role(payload)
    is_admin = role == ADMIN_ROLE or str(user_uuid).lower() in settings.admin_user_ids_list

    logger.debug(f"Authenticated user: {user_id} (admin={is_admin})")
    return AuthUser(id=user_uuid, email=payload.get("email"), role=role, is_admin=is_admin)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Extract and validate user from Supabase JWT token.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        AuthUser: The authenticated user

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    return user_from_token(credentials.credentials)


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional)
) -> Optional[AuthUser]:
    """
    Optionally get the current user from JWT token.

    Returns None if no token is provided or the token is invalid. Public
    listing endpoints use this to decide whether hidden entities are shown.
    """
    if credentials is None:
        return None

    try:
        return user_from_token(credentials.credentials)
    except HTTPException:
        return None


async def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """
    Require an authenticated admin.

    Raises:
        ForbiddenError: 403 if the user is not an admin
    """
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user
