# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable infrastructure:
# - supabase_client.py: Shared Supabase client and the query executor that
#   turns driver failures into StorageError
# =============================================================================

from lib.supabase_client import SupabaseClient, execute

__all__ = [
    "SupabaseClient",
    "execute",
]
