"""Player record store boundary.

The matching service only needs generic CRUD with field-equality
filtering. PlayerStore is that contract; InMemoryPlayerStore implements
it for tests and local tooling.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol
from uuid import uuid4


class PlayerStore(Protocol):
    """Generic record store holding raw player records (camelCase dicts)."""

    async def list(self, limit: int | None = None) -> list[dict[str, Any]]: ...

    async def filter(
        self, criteria: Mapping[str, Any], limit: int | None = None
    ) -> list[dict[str, Any]]: ...

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]: ...

    async def update(
        self, record_id: str, data: Mapping[str, Any]
    ) -> dict[str, Any] | None: ...

    async def delete(self, record_id: str) -> bool: ...


class InMemoryPlayerStore:
    """PlayerStore backed by a dict, preserving insertion order."""

    def __init__(self, records: list[Mapping[str, Any]] | None = None):
        """Initialize store, optionally seeded with records.

        Args:
            records: Initial records; those without an "id" get a new UUID
        """
        self._records: dict[str, dict[str, Any]] = {}
        for record in records or []:
            row = dict(record)
            row.setdefault("id", str(uuid4()))
            self._records[str(row["id"])] = row

    async def list(self, limit: int | None = None) -> list[dict[str, Any]]:
        rows = [dict(r) for r in self._records.values()]
        return rows if limit is None else rows[:limit]

    async def filter(
        self, criteria: Mapping[str, Any], limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Records whose fields equal every criteria value.

        Args:
            criteria: Field name -> required value
            limit: Maximum records to return

        Returns:
            Matching records in insertion order
        """
        rows = [
            dict(r)
            for r in self._records.values()
            if all(r.get(key) == value for key, value in criteria.items())
        ]
        return rows if limit is None else rows[:limit]

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        row = dict(data)
        row["id"] = str(row.get("id") or uuid4())
        self._records[row["id"]] = row
        return dict(row)

    async def update(
        self, record_id: str, data: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        """Merge data into an existing record; None if it does not exist."""
        row = self._records.get(record_id)
        if row is None:
            return None
        row.update({k: v for k, v in data.items() if k != "id"})
        return dict(row)

    async def delete(self, record_id: str) -> bool:
        return self._records.pop(record_id, None) is not None
