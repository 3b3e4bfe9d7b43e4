# =============================================================================
# core/services/child_collections.py - Child Collection Replacement
# =============================================================================
# A child collection is a table whose rows belong to exactly one parent
# entity through a foreign key column (lab_id / team_id). Callers never
# address child rows individually: the stored collection is replaced as a
# whole with the desired list.
#
# replace() runs as:
#   1. snapshot current rows for the parent
#   2. delete all rows for the parent  (failure: raise, never insert)
#   3. stop if the new list is empty   (no empty batch insert)
#   4. bulk insert the new rows        (failure: re-insert the snapshot, raise)
#
# PostgREST gives supabase-py no multi-statement transactions, so step 4's
# restore is the compensation for a failed insert.
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Any

from app.exceptions import StorageError
from lib.supabase_client import execute

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChildCollection:
    """
    One child table of an aggregate.

    Attributes:
        table: Child table name, e.g. "team_members"
        parent_column: Foreign key column pointing at the parent, e.g. "team_id"
        columns: Data columns (without the parent key) written and snapshotted
    """

    table: str
    parent_column: str
    columns: tuple[str, ...]

    def _tag(self, parent_id: int, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [
            {self.parent_column: parent_id, **{col: row.get(col) for col in self.columns}}
            for row in rows
        ]

    def fetch(self, client: Any, parent_id: int) -> list[dict[str, Any]]:
        """Current rows for a parent, data columns only."""
        return execute(
            client.table(self.table)
            .select(", ".join(self.columns))
            .eq(self.parent_column, parent_id),
            f"read {self.table}",
            parent_id=parent_id,
        )

    def replace(self, client: Any, parent_id: int, rows: list[dict[str, Any]]) -> None:
        """
        Make the stored rows for `parent_id` exactly equal `rows`.

        Args:
            client: Supabase client
            parent_id: Id of the owning entity
            rows: Desired rows, without the parent key

        Raises:
            StorageError: If the delete fails (nothing inserted) or the
                insert fails (previous rows restored, best effort)
        """
        snapshot = self.fetch(client, parent_id)

        execute(
            client.table(self.table).delete().eq(self.parent_column, parent_id),
            f"clear {self.table}",
            parent_id=parent_id,
        )

        if not rows:
            return

        try:
            execute(
                client.table(self.table).insert(self._tag(parent_id, rows)),
                f"write {self.table}",
                parent_id=parent_id,
                count=len(rows),
            )
        except StorageError:
            self._restore(client, parent_id, snapshot)
            raise

    def _restore(self, client: Any, parent_id: int, snapshot: list[dict[str, Any]]) -> None:
        if not snapshot:
            return
        try:
            execute(
                client.table(self.table).insert(self._tag(parent_id, snapshot)),
                f"restore {self.table}",
                parent_id=parent_id,
            )
            logger.warning(
                f"Restored {len(snapshot)} {self.table} rows for parent {parent_id} after failed write"
            )
        except StorageError as e:
            # The original insert error is what the caller sees
            logger.error(f"Could not restore {self.table} for parent {parent_id}: {e.message}")
