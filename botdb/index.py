"""
botdb/index.py
ColumnIndex: one equality index per column of a table.

Each column maps index_key(value) -> set of row positions holding that
value. Buckets are never left empty: removing the last position of a
bucket deletes the bucket, so "absent" is the only way a value can be
missing from the index.

The index stores positions only, never row data.
"""

from __future__ import annotations
from typing import Any, Iterable, Sequence

from botdb.codec import index_key
from botdb.errors import FindError, IndexInvariantError


class ColumnIndex:
    """Per-column value -> positions mapping for a table of `width` columns."""

    def __init__(self, width: int) -> None:
        self.width = width
        self._buckets: list[dict[str, set[int]]] = [{} for _ in range(width)]

    @classmethod
    def build(cls, rows: Iterable[Sequence[Any]], width: int) -> ColumnIndex:
        """Full rebuild from the row sequence. O(rows x columns)."""
        index = cls(width)
        for position, row in enumerate(rows):
            index.insert(position, row)
        return index

    # ------------------------------------------------------------------
    # Whole-row maintenance
    # ------------------------------------------------------------------

    def insert(self, position: int, row: Sequence[Any]) -> None:
        for column, value in enumerate(row):
            self.attach(column, position, value)

    def remove(self, position: int, row: Sequence[Any]) -> None:
        for column, value in enumerate(row):
            self.detach(column, position, value)

    # ------------------------------------------------------------------
    # Single-column maintenance
    # ------------------------------------------------------------------

    def attach(self, column: int, position: int, value: Any) -> None:
        self._buckets[column].setdefault(index_key(value), set()).add(position)

    def detach(self, column: int, position: int, value: Any) -> None:
        key = index_key(value)
        bucket = self._buckets[column].get(key)
        if bucket is None or position not in bucket:
            raise IndexInvariantError(
                f"position {position} is not indexed under {key} in column {column}"
            )
        bucket.remove(position)
        if not bucket:
            del self._buckets[column][key]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, column: int, value: Any, where: str = "index") -> set[int]:
        """Return a copy of the bucket for `value`. Raises FindError if absent."""
        bucket = self._buckets[column].get(index_key(value))
        if not bucket:
            raise FindError(value, where)
        return set(bucket)

    def bucket_count(self, column: int) -> int:
        return len(self._buckets[column])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColumnIndex):
            return NotImplemented
        return self._buckets == other._buckets

    def __repr__(self) -> str:
        sizes = [len(b) for b in self._buckets]
        return f"ColumnIndex(width={self.width}, buckets={sizes})"
