# =============================================================================
# tests/fakes.py - In-Memory Supabase Client
# =============================================================================
# Implements the slice of the supabase-py / postgrest query builder the
# stores use, against plain dicts:
#
#   client.table("teams").select("id, team_members (name)").eq("id", 1).execute()
#
# Supported: select (with embedded resources), insert, update, delete,
# eq, neq, in_, ilike, order, limit.
#
# Embedded resources are resolved by naming convention:
# - many-to-one when the row has a "<relation singular>_id" column
#   (lab_team_links.lab_id -> labs)
# - one-to-many otherwise, through "<parent singular>_id" on the child
#   (teams.id <- team_members.team_id)
#
# Every executed query is recorded in `calls`, and `fail()` makes the next
# N matching queries raise postgrest's APIError.
# =============================================================================

import copy
import re
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from postgrest.exceptions import APIError


def parse_select(text: str) -> list[Any]:
    """
    Parse a PostgREST select string.

    Returns a list whose items are column names or (relation, items) tuples.

    Example:
        parse_select("id, team_members (name, role)")
        # ["id", ("team_members", ["name", "role"])]
    """
    tokens = re.findall(r"[A-Za-z0-9_*]+|[(),]", text or "*")
    pos = 0

    def parse_items() -> list[Any]:
        nonlocal pos
        items: list[Any] = []
        while pos < len(tokens) and tokens[pos] != ")":
            token = tokens[pos]
            pos += 1
            if token == ",":
                continue
            if pos < len(tokens) and tokens[pos] == "(":
                pos += 1
                children = parse_items()
                pos += 1
                items.append((token, children))
            else:
                items.append(token)
        return items

    return parse_items()


def _singular(table: str) -> str:
    return table[:-1] if table.endswith("s") else table


def _ilike(pattern: str) -> re.Pattern:
    parts = [re.escape(part) for part in pattern.split("%")]
    return re.compile(".*".join(parts), re.IGNORECASE | re.DOTALL)


@dataclass
class FakeResponse:
    data: list[dict[str, Any]]


@dataclass
class Call:
    """One executed query."""

    op: str
    table: str
    filters: list[tuple[str, str, Any]]
    payload: Any = None


@dataclass
class FakeQuery:
    db: "FakeSupabase"
    table: str
    op: str = "select"
    columns: str = "*"
    payload: Any = None
    filters: list[tuple[str, str, Any]] = field(default_factory=list)
    order_by: list[tuple[str, bool]] = field(default_factory=list)
    row_limit: int | None = None

    # Operations

    def select(self, columns: str = "*") -> "FakeQuery":
        self.op = "select"
        self.columns = columns
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict[str, Any]) -> "FakeQuery":
        self.op = "update"
        self.payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    # Filters and modifiers

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(("eq", column, value))
        return self

    def neq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(("neq", column, value))
        return self

    def in_(self, column: str, values: list[Any]) -> "FakeQuery":
        self.filters.append(("in", column, list(values)))
        return self

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        self.filters.append(("ilike", column, pattern))
        return self

    def order(self, column: str, *, desc: bool = False) -> "FakeQuery":
        self.order_by.append((column, desc))
        return self

    def limit(self, size: int) -> "FakeQuery":
        self.row_limit = size
        return self

    def execute(self) -> FakeResponse:
        return self.db.run(self)


class FakeSupabase:
    """
    Stand-in for supabase.Client with an in-memory table store.

    Usage:
        db = FakeSupabase()
        db.seed("profiles", [{"user_id": "...", "email": "ada@lab.org"}])
        db.fail("insert", "team_photos")      # next photo insert raises
        store = TeamStore(db)
    """

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.calls: list[Call] = []
        self._next_id: dict[str, int] = defaultdict(lambda: 1)
        self._failures: dict[tuple[str, str], int] = {}
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------------

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert rows directly, assigning ids, without recording a call."""
        with self._lock:
            return [self._store_row(table, row) for row in rows]

    def rows(self, table: str) -> list[dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self.tables[table])

    def fail(self, op: str, table: str, times: int = 1) -> None:
        """Make the next `times` queries of this kind raise APIError."""
        with self._lock:
            self._failures[(op, table)] = times

    def calls_for(self, op: str, table: str) -> list[Call]:
        return [call for call in self.calls if call.op == op and call.table == table]

    def reset_calls(self) -> None:
        self.calls.clear()

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def run(self, query: FakeQuery) -> FakeResponse:
        with self._lock:
            self.calls.append(
                Call(query.op, query.table, list(query.filters), copy.deepcopy(query.payload))
            )

            remaining = self._failures.get((query.op, query.table), 0)
            if remaining:
                self._failures[(query.op, query.table)] = remaining - 1
                raise APIError({
                    "message": f"simulated {query.op} failure on {query.table}",
                    "code": "XX000",
                    "hint": None,
                    "details": None,
                })

            handler = getattr(self, f"_run_{query.op}")
            return FakeResponse(handler(query))

    def _store_row(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(row)
        if stored.get("id") is None:
            stored["id"] = self._next_id[table]
        self._next_id[table] = max(self._next_id[table], int(stored["id"])) + 1
        self.tables[table].append(stored)
        return copy.deepcopy(stored)

    def _matches(self, row: dict[str, Any], filters: list[tuple[str, str, Any]]) -> bool:
        for kind, column, value in filters:
            current = row.get(column)
            if kind == "eq" and current != value:
                return False
            if kind == "neq" and current == value:
                return False
            if kind == "in" and current not in value:
                return False
            if kind == "ilike" and not _ilike(value).fullmatch(str(current or "")):
                return False
        return True

    def _project(self, table: str, row: dict[str, Any], items: list[Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for item in items:
            if item == "*":
                result.update(copy.deepcopy(row))
            elif isinstance(item, tuple):
                relation, children = item
                result[relation] = self._embed(table, row, relation, children)
            else:
                result[item] = copy.deepcopy(row.get(item))
        return result

    def _embed(self, table: str, row: dict[str, Any], relation: str, items: list[Any]) -> Any:
        foreign_key = f"{_singular(relation)}_id"
        if foreign_key in row:
            for target in self.tables[relation]:
                if target.get("id") == row[foreign_key]:
                    return self._project(relation, target, items)
            return None

        parent_key = f"{_singular(table)}_id"
        return [
            self._project(relation, child, items)
            for child in self.tables[relation]
            if child.get(parent_key) == row.get("id")
        ]

    def _run_select(self, query: FakeQuery) -> list[dict[str, Any]]:
        rows = [row for row in self.tables[query.table] if self._matches(row, query.filters)]
        for column, desc in reversed(query.order_by):
            rows.sort(key=lambda row: (row.get(column) is None, row.get(column)), reverse=desc)
        if query.row_limit is not None:
            rows = rows[: query.row_limit]
        items = parse_select(query.columns)
        return [self._project(query.table, row, items) for row in rows]

    def _run_insert(self, query: FakeQuery) -> list[dict[str, Any]]:
        payload = query.payload if isinstance(query.payload, list) else [query.payload]
        return [self._store_row(query.table, row) for row in payload]

    def _run_update(self, query: FakeQuery) -> list[dict[str, Any]]:
        updated = []
        for row in self.tables[query.table]:
            if self._matches(row, query.filters):
                row.update(copy.deepcopy(query.payload))
                updated.append(copy.deepcopy(row))
        return updated

    def _run_delete(self, query: FakeQuery) -> list[dict[str, Any]]:
        kept, removed = [], []
        for row in self.tables[query.table]:
            (removed if self._matches(row, query.filters) else kept).append(row)
        self.tables[query.table] = kept

        # ON DELETE CASCADE for child tables keyed by "<table singular>_id"
        parent_key = f"{_singular(query.table)}_id"
        removed_ids = {row.get("id") for row in removed}
        for name, rows in self.tables.items():
            if name != query.table and any(parent_key in row for row in rows):
                self.tables[name] = [row for row in rows if row.get(parent_key) not in removed_ids]

        return copy.deepcopy(removed)
