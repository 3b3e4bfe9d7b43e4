# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module owns the shared Supabase client and the single place where
# PostgREST queries are executed.
#
# - SupabaseClient.get_client(): lazily created singleton handle. Stores never
#   reach for it directly; the FastAPI dependency layer injects it.
# - execute(): runs a query builder and converts any driver failure into a
#   StorageError so callers deal with one error type.
#
# Usage:
#   from lib.supabase_client import SupabaseClient, execute
#   client = SupabaseClient.get_client()
#   rows = execute(client.table("labs").select("id"), "list labs")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import create_client, Client

from app.config import settings
from app.exceptions import StorageError

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClient:
    """
    Holder for the process-wide Supabase client.

    The client is stateless between requests, so one instance is shared by
    every store.
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            StorageError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise StorageError(
                    action="create Supabase client",
                    error=str(e),
                ) from e
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client (used when settings change)."""
        cls._instance = None


def execute(query: Any, action: str, **details: Any) -> list[dict[str, Any]]:
    """
    Execute a PostgREST query builder and return its rows.

    Args:
        query: A supabase-py query builder, ready to execute
        action: Short description used in the error message ("insert lab")
        **details: Extra context attached to the StorageError

    Returns:
        The response rows (empty list when the response carries no data)

    Raises:
        StorageError: If the query fails for any reason
    """
    try:
        response = query.execute()
    except StorageError:
        raise
    except Exception as e:
        logger.error(f"Supabase query failed ({action}): {e}")
        raise StorageError(action=action, error=str(e), details=details) from e

    if response is None:
        return []
    return response.data or []
