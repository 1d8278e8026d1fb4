"""
botdb/catalog.py
Catalog: the registry of tables known on disk and loaded in memory.

At construction the data directory is scanned and every table file found
becomes "known". A known table is read from disk the first time an
operation needs it (load on demand) and stays loaded for the lifetime of
the catalog. Names never leave the known set.

Every table operation runs under that table's own lock, and the
registry itself (known names, loaded tables, locks) under the catalog
lock, so the background flusher never sees a half-applied mutation.
"""

from __future__ import annotations
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Iterator, Sequence, TypeVar

from botdb import codec
from botdb.codec import STRUCTURED, Row
from botdb.errors import (
    CorruptionError,
    DuplicationError,
    InvalidDataError,
    TypeMismatchError,
    UnexistingError,
)
from botdb.table import TMP_SUFFIX, Table, validate_schema

logger = logging.getLogger(__name__)

T = TypeVar("T")


def normalize_name(name: Any) -> str:
    """Trim `name` and check it can be used as a file name."""
    if not isinstance(name, str):
        raise TypeMismatchError("table name", "str", name)
    name = name.strip()
    if not name or name.startswith(".") or "/" in name or "\\" in name:
        raise InvalidDataError(f"Invalid table name: {name!r}")
    if name.endswith(TMP_SUFFIX):
        raise InvalidDataError(f"Table names may not end in {TMP_SUFFIX!r}: {name!r}")
    return name


class Catalog:
    """
    Owns every Table of one data directory.

    Public operations take table names, never Table objects.
    """

    def __init__(self, data_dir: str | Path, encoding: str = STRUCTURED) -> None:
        self._dir = Path(data_dir)
        if not self._dir.exists():
            logger.info("Creating data directory %s", self._dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self.encoding = encoding
        self._lock = threading.RLock()
        self._known: set[str] = set(self._scan())
        self._tables: dict[str, Table] = {}
        self._table_locks: dict[str, threading.RLock] = {}

    @property
    def data_dir(self) -> Path:
        return self._dir

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def table_exists(self, name: str) -> bool:
        name = normalize_name(name)
        with self._lock:
            return name in self._known

    def list_tables(self) -> list[str]:
        """Sorted names of all known tables, loaded or not."""
        with self._lock:
            return sorted(self._known)

    def loaded_tables(self) -> list[str]:
        with self._lock:
            return sorted(self._tables)

    def is_dirty(self, name: str) -> bool:
        return self._run(name, lambda t: t.data_modified)

    def path_for(self, name: str) -> Path:
        return self._dir / name

    def ensure_loaded(self, name: str) -> None:
        """Raise UnexistingError for unknown names; load known ones from disk."""
        self._get(normalize_name(name))

    def reload(self, name: str) -> None:
        """Replace the in-memory table with a fresh read of its file."""
        name = normalize_name(name)
        with self._lock:
            if name not in self._known:
                raise UnexistingError(name)
            with self._lock_for(name):
                self._tables[name] = self._load(name)

    # ------------------------------------------------------------------
    # DDL
    # ------------------------------------------------------------------

    def create_table(self, name: str, schema: Sequence[str]) -> None:
        name = normalize_name(name)
        columns = validate_schema(schema)
        with self._lock:
            if name in self._known:
                raise DuplicationError(name)
            self._tables[name] = Table.create(name, columns, encoding=self.encoding)
            self._known.add(name)
        logger.info("Created table %s with columns %s", name, columns)

    def create_if_absent(self, name: str, schema: Sequence[str]) -> None:
        """Create the table, or check an existing one has the same columns."""
        name = normalize_name(name)
        columns = validate_schema(schema)
        with self._lock:
            if name not in self._known:
                self.create_table(name, columns)
                return
            table = self._get(name)
        if table.schema != columns:
            raise InvalidDataError(
                f"Table '{name}' has columns {table.schema}, requested {columns}"
            )

    # ------------------------------------------------------------------
    # DML / queries
    # ------------------------------------------------------------------

    def add_row(self, name: str, row: Sequence[Any]) -> int:
        return self._run(name, lambda t: t.add_row(row))

    def delete_row(self, name: str, position: int) -> None:
        self._run(name, lambda t: t.delete_row(position))

    def update_cell(self, name: str, position: int, column: str, value: Any) -> None:
        self._run(name, lambda t: t.update_cell(position, column, value))

    def lookup_by_value(self, name: str, column: str, value: Any) -> set[int]:
        return self._run(name, lambda t: t.lookup_by_value(column, value))

    def read_cell(self, name: str, position: int, column: str) -> Any:
        return self._run(name, lambda t: t.read_cell(position, column))

    def rows(self, name: str) -> list[Row]:
        return self._run(name, lambda t: t.rows())

    def schema(self, name: str) -> list[str]:
        return self._run(name, lambda t: list(t.schema))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def flush_table(self, name: str) -> bool:
        name = normalize_name(name)
        with self._lock:
            table = self._tables.get(name)
            if table is None:
                return False
            lock = self._lock_for(name)
        with lock:
            return table.flush(self.path_for(name))

    def flush_all(self) -> int:
        """
        Flush every loaded dirty table and return how many were written.
        A table whose write fails stays dirty and is retried next time;
        the remaining tables are still flushed.
        """
        with self._lock:
            names = [
                n for n, t in self._tables.items()
                if t.data_modified and t.row_count() > 0
            ]
        saved = 0
        for name in names:
            logger.info("Saving table %s", name)
            try:
                if self.flush_table(name):
                    saved += 1
            except (OSError, ValueError):
                logger.exception("Failed to save table %s; will retry", name)
        if saved > 0:
            logger.info("Saved %d tables", saved)
        return saved

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _scan(self) -> Iterator[str]:
        for entry in self._dir.iterdir():
            if not entry.is_file() or entry.name.startswith("."):
                continue
            if entry.name.endswith(TMP_SUFFIX):
                continue
            yield entry.name

    def _lock_for(self, name: str) -> threading.RLock:
        with self._lock:
            return self._table_locks.setdefault(name, threading.RLock())

    def _get(self, name: str) -> Table:
        with self._lock:
            if name not in self._known:
                raise UnexistingError(name)
            table = self._tables.get(name)
            if table is None:
                table = self._load(name)
                self._tables[name] = table
            return table

    def _load(self, name: str) -> Table:
        logger.info("Loading table %s", name)
        try:
            text = self.path_for(name).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CorruptionError(f"Table file '{name}' is not valid UTF-8: {e}") from e
        schema, rows = codec.load_table(text, self.encoding)
        try:
            return Table(name, schema, rows, encoding=self.encoding)
        except InvalidDataError as e:
            raise CorruptionError(f"Table file '{name}' holds invalid data: {e}") from e

    def _run(self, name: str, op: Callable[[Table], T]) -> T:
        name = normalize_name(name)
        self._get(name)
        with self._lock_for(name):
            return op(self._tables[name])

    def __repr__(self) -> str:
        return (
            f"Catalog(dir={str(self._dir)!r}, known={len(self._known)}, "
            f"loaded={len(self._tables)})"
        )
