# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .child_collections import ChildCollection
from .entity_store import CollectionBinding, EntityLocks, EntityStore
from .lab_store import LabStore
from .team_store import TeamStore
from .lab_request_store import LabRequestStore
from .collaboration_store import CollaborationStore

__all__ = [
    "ChildCollection",
    "CollectionBinding",
    "EntityLocks",
    "EntityStore",
    "LabStore",
    "TeamStore",
    "LabRequestStore",
    "CollaborationStore",
]
