"""Pure Python in-memory database for unit testing."""

import asyncio
import copy
import json
import operator
import re
from datetime import UTC, datetime
from typing import Any

from src.core.db_client import (
    _COMPARISON_RE,
    DatabaseError,
    RecordNotFoundError,
    _parse_value,
    _split_and_conditions,
)


_OPERATORS = {
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class InMemoryDBClient:
    """Pure Python in-memory database for unit testing.

    Mirrors the keyword interface of ``src.core.db_client`` without touching
    SQLite. Supports CRUD, simple filtering and sorting. Collections listed in
    ``failing_updates`` reject every update with DatabaseError, which lets tests
    exercise partially failed writes.
    """

    def __init__(self):
        """Initialize empty in-memory database."""
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._id_counter = 1000
        self.failing_updates: set[str] = set()

    def _get_stored(self, collection: str, record_id: str) -> dict[str, Any]:
        if not isinstance(record_id, str):
            raise DatabaseError(f"Record ID must be a string, got {type(record_id)}")

        stored = self._collections.get(collection, {}).get(record_id)
        if stored is None:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        return stored

    async def create_record(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create a new record; ``created``/``updated`` in data override the defaults.

        Raises:
            DatabaseError: If data is not a dictionary
        """
        if not isinstance(data, dict):
            raise DatabaseError(f"Data must be a dictionary, got {type(data)}")

        record_id = str(self._id_counter)
        self._id_counter += 1

        now = _now()
        record = {"id": record_id, "created": now, "updated": now, **copy.deepcopy(data)}
        self._collections.setdefault(collection, {})[record_id] = record

        return copy.deepcopy(record)

    async def get_record(self, collection: str, record_id: str) -> dict[str, Any]:
        """Get a record by ID.

        Raises:
            RecordNotFoundError: If record not found
            DatabaseError: If the ID is not a string
        """
        return copy.deepcopy(self._get_stored(collection, record_id))

    async def update_record(self, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Merge data into an existing record.

        Raises:
            RecordNotFoundError: If record not found
            DatabaseError: For invalid input or collections set up to fail
        """
        if not isinstance(data, dict):
            raise DatabaseError(f"Data must be a dictionary, got {type(data)}")

        if collection in self.failing_updates:
            raise DatabaseError(f"Failed to update record in {collection}: simulated failure")

        record = self._get_stored(collection, record_id)

        # Keep updated timestamps distinct from created
        await asyncio.sleep(0.001)
        record.update(copy.deepcopy(data))
        record["updated"] = _now()

        return copy.deepcopy(record)

    async def delete_record(self, collection: str, record_id: str) -> None:
        """Delete a record.

        Raises:
            RecordNotFoundError: If record not found
        """
        self._get_stored(collection, record_id)
        del self._collections[collection][record_id]

    async def list_records(
        self,
        collection: str,
        page: int = 1,
        per_page: int = 50,
        filter_query: str = "",
        sort: str = "",
    ) -> list[dict[str, Any]]:
        """List records with optional filtering, sorting and pagination.

        Raises:
            DatabaseError: For invalid filter syntax
        """
        records = list(self._collections.get(collection, {}).values())

        if filter_query:
            records = [r for r in records if self._parse_filter(filter_query, r)]

        if sort:
            records = self._apply_sort(records, sort)

        start_idx = (page - 1) * per_page
        return [copy.deepcopy(r) for r in records[start_idx : start_idx + per_page]]

    async def get_first_record(self, collection: str, filter_query: str) -> dict[str, Any] | None:
        """Get the first matching record or None."""
        records = await self.list_records(collection, per_page=1, filter_query=filter_query)
        return records[0] if records else None

    def _parse_filter(self, filter_str: str, record: dict[str, Any]) -> bool:
        """Evaluate a filter expression against a record.

        Uses the real client's grammar: quoted values compare as text,
        unquoted literals (``7``, ``false``) as numbers or booleans, ``~`` is a
        case-insensitive contains, and conditions are joined with ``&&``.
        Missing fields never match, as with SQL NULL.

        Raises:
            DatabaseError: For invalid filter syntax
        """
        return all(self._matches(cond, record) for cond in _split_and_conditions(filter_str))

    def _matches(self, comparison: str, record: dict[str, Any]) -> bool:
        match = _COMPARISON_RE.match(comparison)
        if not match:
            raise DatabaseError(f"Invalid filter syntax: {comparison}")

        field, op, quote = match.group(1, 2, 3)
        actual = record.get(field)
        if actual is None:
            return False

        if quote:
            raw = match.group(4)
            expected = json.loads(f'"{raw}"') if quote == '"' else re.sub(r"\\(.)", r"\1", raw)
            actual = str(actual)
        else:
            expected = _parse_value(match.group(5))

        if op == "~":
            return str(expected).lower() in str(actual).lower()
        return _OPERATORS[op](actual, expected)

    def _apply_sort(self, records: list[dict], sort: str) -> list[dict]:
        """Sort records by one field; a ``-`` prefix sorts descending."""
        reverse = sort.startswith("-")
        field = sort.lstrip("+-")

        return sorted(records, key=lambda r: str(r.get(field) or ""), reverse=reverse)
