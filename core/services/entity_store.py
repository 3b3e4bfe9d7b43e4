# =============================================================================
# core/services/entity_store.py - Aggregate Store Base Class
# =============================================================================
# Labs and teams share one persistence pattern: a base row plus several child
# collections, written as "make storage reflect exactly this state".
#
# EntityStore implements that pattern once:
# - Reads embed every child table in one select and map rows to entities
# - create() writes the base row, then every child collection in order
# - update() writes only the base columns and collections named in the patch
# - delete() removes the base row; child rows cascade in the database
#
# Subclasses (LabStore, TeamStore) declare their tables, select string,
# schemas and collection bindings.
# =============================================================================

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, Iterator, TypeVar

from pydantic import BaseModel

from app.exceptions import NotFoundError, RowMappingError, StorageError
from core.mapping import base_row
from core.services.child_collections import ChildCollection
from core.validation import parse_payload
from lib.supabase_client import execute

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=BaseModel)


@dataclass(frozen=True)
class CollectionBinding:
    """
    Ties payload fields to a child collection.

    Attributes:
        fields: Payload fields whose presence triggers a rewrite
        collection: The child table to rewrite
        rows: Builds the child rows from an object exposing those fields
    """

    fields: tuple[str, ...]
    collection: ChildCollection
    rows: Callable[[Any], list[dict[str, Any]]]


class EntityLocks:
    """
    Per-entity mutexes shared by every store instance in the process.

    Two updates of the same entity never interleave their child
    delete/insert steps. A lock is dropped once no caller holds or waits
    for it.
    """

    _guard = threading.Lock()
    _locks: dict[tuple[str, int], threading.Lock] = {}
    _users: dict[tuple[str, int], int] = {}

    @classmethod
    @contextmanager
    def hold(cls, table: str, entity_id: int) -> Iterator[None]:
        key = (table, entity_id)
        with cls._guard:
            lock = cls._locks.setdefault(key, threading.Lock())
            cls._users[key] = cls._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with cls._guard:
                cls._users[key] -= 1
                if not cls._users[key]:
                    del cls._users[key]
                    del cls._locks[key]

    @classmethod
    def active(cls) -> int:
        """Number of entities with a lock currently held or awaited."""
        with cls._guard:
            return len(cls._locks)


class EntityStore(Generic[EntityT]):
    """
    Repository for one aggregate family.

    The Supabase client is injected so tests can pass a fake and so no
    store reaches for a global handle.
    """

    table: ClassVar[str]
    entity_name: ClassVar[str]
    select_columns: ClassVar[str]
    create_model: ClassVar[type[BaseModel]]
    update_model: ClassVar[type[BaseModel]]
    base_fields: ClassVar[tuple[str, ...]]
    column_defaults: ClassVar[dict[str, Any]] = {}
    bindings: ClassVar[tuple[CollectionBinding, ...]] = ()

    def __init__(self, client: Any):
        self.client = client

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    def from_row(self, row: dict[str, Any]) -> EntityT:
        raise NotImplementedError

    def prepare_base_row(
        self,
        row: dict[str, Any],
        payload: BaseModel,
        existing: EntityT | None,
    ) -> dict[str, Any]:
        """Adjust the base row before it is written. Default: unchanged."""
        return row

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _select(self):
        return self.client.table(self.table).select(self.select_columns)

    def _map_rows(self, rows: list[dict[str, Any]]) -> list[EntityT]:
        entities = []
        for row in rows:
            try:
                entities.append(self.from_row(row))
            except RowMappingError as e:
                logger.warning(
                    f"Skipping {self.entity_name.lower()} {row.get('id')} with invalid data: {e.details.get('error')}"
                )
        return entities

    def list(self) -> list[EntityT]:
        """All entities, id ascending."""
        rows = execute(self._select().order("id"), f"list {self.table}")
        return self._map_rows(rows)

    def list_visible(self) -> list[EntityT]:
        """Entities with is_visible set, id ascending."""
        rows = execute(
            self._select().eq("is_visible", True).order("id"),
            f"list visible {self.table}",
        )
        return self._map_rows(rows)

    def list_by_owner(self, owner_user_id: str) -> list[EntityT]:
        """Entities owned by a user, id ascending."""
        rows = execute(
            self._select().eq("owner_user_id", str(owner_user_id)).order("id"),
            f"list {self.table} by owner",
            owner_user_id=str(owner_user_id),
        )
        return self._map_rows(rows)

    def list_by_ids(self, ids: list[int]) -> list[EntityT]:
        if not ids:
            return []
        rows = execute(
            self._select().in_("id", sorted(set(ids))).order("id"),
            f"list {self.table} by id",
        )
        return self._map_rows(rows)

    def find_by_id(self, entity_id: int) -> EntityT | None:
        """
        Fetch one entity with all child collections.

        Returns:
            The entity, or None when no row has this id

        Raises:
            RowMappingError: If the stored row can't be mapped
            StorageError: If the query fails
        """
        rows = execute(
            self._select().eq("id", entity_id).limit(1),
            f"fetch {self.entity_name.lower()}",
            id=entity_id,
        )
        if not rows:
            return None
        return self.from_row(rows[0])

    def get(self, entity_id: int) -> EntityT:
        """Like find_by_id, but raises NotFoundError when missing."""
        entity = self.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        return entity

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _write_collections(
        self,
        entity_id: int,
        source: Any,
        named: set[str] | None = None,
    ) -> None:
        for binding in self.bindings:
            if named is not None and not named.intersection(binding.fields):
                continue
            binding.collection.replace(self.client, entity_id, binding.rows(source))

    def create(self, payload: Any) -> EntityT:
        """
        Create an entity and every child collection.

        Raises:
            ValidationError: If the payload fails validation (nothing written)
            StorageError: If any write fails. The base row is not rolled back
                when a child write fails.
        """
        data = parse_payload(self.create_model, payload)

        row = base_row(data, self.base_fields, self.column_defaults)
        row = self.prepare_base_row(row, data, None)

        inserted = execute(
            self.client.table(self.table).insert(row),
            f"insert {self.entity_name.lower()}",
        )
        if not inserted or inserted[0].get("id") is None:
            raise StorageError(f"insert {self.entity_name.lower()}", "Insert returned no id")

        entity_id = int(inserted[0]["id"])
        logger.info(f"Created {self.entity_name.lower()} {entity_id}")

        self._write_collections(entity_id, data)

        created = self.find_by_id(entity_id)
        if created is None:
            raise NotFoundError(self.entity_name, entity_id)
        return created

    def update(self, entity_id: int, patch: Any) -> EntityT:
        """
        Apply a partial update.

        Base columns and child collections are written only when their key
        is present in the patch. An empty patch returns the entity unchanged.

        Raises:
            NotFoundError: If the entity doesn't exist, before or after the write
            ValidationError: If a present field fails validation
            StorageError: If any write fails
        """
        with EntityLocks.hold(self.table, entity_id):
            existing = self.get(entity_id)
            data = parse_payload(self.update_model, patch)
            named = set(data.model_fields_set)

            if not named:
                return existing

            row = base_row(data, [f for f in self.base_fields if f in named], self.column_defaults)
            row = self.prepare_base_row(row, data, existing)
            if row:
                execute(
                    self.client.table(self.table).update(row).eq("id", entity_id),
                    f"update {self.entity_name.lower()}",
                    id=entity_id,
                )

            # Collections read unnamed fields (e.g. equipment when only
            # priorityEquipment is sent) from the stored entity
            merged = existing.model_copy(update={field: getattr(data, field) for field in named})
            self._write_collections(entity_id, merged, named)

            logger.info(f"Updated {self.entity_name.lower()} {entity_id}: {sorted(named)}")

            updated = self.find_by_id(entity_id)
            if updated is None:
                raise NotFoundError(self.entity_name, entity_id)
            return updated

    def delete(self, entity_id: int) -> None:
        """
        Delete an entity. Child rows are removed by ON DELETE CASCADE.

        Raises:
            NotFoundError: If the entity doesn't exist
        """
        with EntityLocks.hold(self.table, entity_id):
            rows = execute(
                self.client.table(self.table).select("id").eq("id", entity_id).limit(1),
                f"fetch {self.entity_name.lower()}",
                id=entity_id,
            )
            if not rows:
                raise NotFoundError(self.entity_name, entity_id)

            execute(
                self.client.table(self.table).delete().eq("id", entity_id),
                f"delete {self.entity_name.lower()}",
                id=entity_id,
            )
            logger.info(f"Deleted {self.entity_name.lower()} {entity_id}")
