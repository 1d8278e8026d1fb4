"""
botdb/table.py
Table: one named collection of fixed-width rows plus its column indexes.

Rows are addressed by position (zero-based offset into the row list).
Positions are offsets, not stable handles: deleting a row shifts every
later row down by one.

Index maintenance is two-tier:
  add_row / update_cell   incremental (touch only the affected buckets)
  delete_row              full rebuild, O(rows x columns); batch deletes
                          from the highest position down when possible

Every mutation sets the dirty flag; flush() clears it once the file has
been durably replaced.
"""

from __future__ import annotations
import copy
import logging
import os
from pathlib import Path
from typing import Any, Sequence

from botdb import codec
from botdb.codec import STRUCTURED, Row
from botdb.errors import (
    FindError,
    InvalidDataError,
    RangeError,
    TypeMismatchError,
)
from botdb.index import ColumnIndex

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"


def validate_schema(schema: Any) -> list[str]:
    """Return the schema as a list, or raise InvalidDataError."""
    if not isinstance(schema, (list, tuple)):
        raise TypeMismatchError("schema", "a list of column names", schema)
    columns = list(schema)
    if not columns:
        raise InvalidDataError("A table needs at least one column")
    for col in columns:
        if not isinstance(col, str) or not col or any(ch.isspace() for ch in col):
            raise InvalidDataError(f"Invalid column name: {col!r}")
    if "#" in columns:
        raise InvalidDataError("'#' is reserved for row positions")
    if len(set(columns)) != len(columns):
        raise InvalidDataError(f"Duplicate column names: {columns}")
    return columns


class Table:
    """
    In-memory table with one equality index per column.

    Tables are normally owned by a Catalog; callers go through the
    catalog's name-based operations rather than holding a Table.
    """

    def __init__(
        self,
        name: str,
        schema: Sequence[str],
        rows: list[Row] | None = None,
        encoding: str = STRUCTURED,
    ) -> None:
        self.name = name.strip()
        self.schema: list[str] = validate_schema(schema)
        self.encoding = encoding
        self._rows: list[Row] = []
        for row in rows or []:
            self._validate_row(row)
            self._rows.append(copy.deepcopy(list(row)))
        self.data_modified = False
        self._reindex()

    @classmethod
    def create(cls, name: str, schema: Sequence[str], encoding: str = STRUCTURED) -> Table:
        """A new, empty table. It is dirty until its first successful flush."""
        table = cls(name, schema, encoding=encoding)
        table.data_modified = True
        return table

    # DML ---------------------------------------------------------------

    def add_row(self, row: Sequence[Any]) -> int:
        """Append `row` and return its position."""
        self._validate_row(row)
        position = len(self._rows)
        stored = copy.deepcopy(list(row))
        self._rows.append(stored)
        self._index.insert(position, stored)
        self.data_modified = True
        return position

    def delete_row(self, position: int) -> None:
        self._check_position(position)
        del self._rows[position]
        self._reindex()
        self.data_modified = True

    def update_cell(self, position: int, column: str, new_value: Any) -> None:
        self._check_position(position)
        col = self.column_index(column)
        codec.validate_value(new_value, self.encoding)
        row = self._rows[position]
        self._index.detach(col, position, row[col])
        row[col] = copy.deepcopy(new_value)
        self._index.attach(col, position, row[col])
        self.data_modified = True

    # Queries -----------------------------------------------------------

    def lookup_by_value(self, column: str, value: Any) -> set[int]:
        """Positions whose `column` holds `value`. Raises FindError if none."""
        col = self.column_index(column)
        try:
            codec.validate_value(value)
        except InvalidDataError:
            raise TypeMismatchError("value", "a storable value", value) from None
        return self._index.lookup(col, value, where=f"column '{column}' of table '{self.name}'")

    def read_cell(self, position: int, column: str) -> Any:
        self._check_position(position)
        return copy.deepcopy(self._rows[position][self.column_index(column)])

    def rows(self) -> list[Row]:
        """Copies of all rows, in position order."""
        return copy.deepcopy(self._rows)

    def row_count(self) -> int:
        return len(self._rows)

    def column_index(self, column: str) -> int:
        if not isinstance(column, str):
            raise TypeMismatchError("column", "str", column)
        try:
            return self.schema.index(column)
        except ValueError:
            raise FindError(column, f"columns of table '{self.name}'") from None

    def check_consistency(self) -> bool:
        """True if the incremental index equals a fresh rebuild."""
        return self._index == ColumnIndex.build(self._rows, len(self.schema))

    # Persistence -------------------------------------------------------

    def flush(self, path: str | Path) -> bool:
        """
        Write the whole table to `path`. Returns False (and writes nothing)
        for an empty table. The file is replaced atomically and the dirty
        flag is only cleared after the replace succeeded.
        """
        if not self._rows:
            return False
        path = Path(path)
        text = codec.dump_table(self.schema, self._rows, self.encoding)
        tmp = path.with_name(path.name + TMP_SUFFIX)
        try:
            with open(tmp, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        self.data_modified = False
        logger.info("The table %s has been saved (%d rows)", self.name, len(self._rows))
        return True

    # Internal ----------------------------------------------------------

    def _reindex(self) -> None:
        logger.debug("Indexing table %s", self.name)
        self._index = ColumnIndex.build(self._rows, len(self.schema))

    def _validate_row(self, row: Any) -> None:
        if not isinstance(row, (list, tuple)):
            raise TypeMismatchError("row", "a list of values", row)
        if len(row) != len(self.schema):
            raise InvalidDataError(
                f"Row has {len(row)} values but table '{self.name}' "
                f"has {len(self.schema)} columns"
            )
        for value in row:
            codec.validate_value(value, self.encoding)

    def _check_position(self, position: int) -> None:
        if isinstance(position, bool) or not isinstance(position, int):
            raise TypeMismatchError("position", "int", position)
        if position < 0 or position >= len(self._rows):
            raise RangeError(position, len(self._rows))

    def __repr__(self) -> str:
        return (
            f"Table(name={self.name!r}, columns={self.schema!r}, "
            f"rows={len(self._rows)}, dirty={self.data_modified})"
        )
