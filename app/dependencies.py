# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Stores take the Supabase client in their constructor; tests override
# get_supabase_client to hand every store an in-memory fake.
# =============================================================================

from typing import Annotated, Any

from fastapi import Depends

from core.services import CollaborationStore, LabRequestStore, LabStore, TeamStore
from lib.supabase_client import SupabaseClient


def get_supabase_client() -> Any:
    """
    Get Supabase client instance.

    Returns the process-wide client.
    """
    return SupabaseClient.get_client()


SupabaseDep = Annotated[Any, Depends(get_supabase_client)]


def get_lab_store(client: SupabaseDep) -> LabStore:
    return LabStore(client)


def get_team_store(client: SupabaseDep) -> TeamStore:
    return TeamStore(client)


def get_lab_request_store(client: SupabaseDep) -> LabRequestStore:
    return LabRequestStore(client)


def get_collaboration_store(client: SupabaseDep) -> CollaborationStore:
    return CollaborationStore(client)


# Type aliases for dependency injection
LabStoreDep = Annotated[LabStore, Depends(get_lab_store)]
TeamStoreDep = Annotated[TeamStore, Depends(get_team_store)]
LabRequestStoreDep = Annotated[LabRequestStore, Depends(get_lab_request_store)]
CollaborationStoreDep = Annotated[CollaborationStore, Depends(get_collaboration_store)]
