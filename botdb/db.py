"""
botdb/db.py
BotDB: the store object handed to every consumer.

  BotDB()                          settings from BOTDB_* env vars
  BotDB(data_dir="./data")         explicit overrides
  BotDB(StoreConfig(...))          full config

Construction scans the data directory and starts the background flush
scheduler; close() (or leaving the `with` block) stops the scheduler and
writes every dirty table one last time.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Sequence

from botdb.catalog import Catalog
from botdb.codec import Row
from botdb.config import StoreConfig
from botdb.scheduler import FlushScheduler

logger = logging.getLogger(__name__)


class BotDB:
    """
    Owns one Catalog and its FlushScheduler.

    Args:
        config: base settings; defaults to StoreConfig.from_env().
        data_dir, flush_interval, encoding: override the config when given.
        autostart: start the background scheduler immediately.
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        *,
        data_dir: str | Path | None = None,
        flush_interval: float | None = None,
        encoding: str | None = None,
        autostart: bool = True,
    ) -> None:
        base = config if config is not None else StoreConfig.from_env()
        self.config = base.with_overrides(
            data_dir=data_dir, flush_interval=flush_interval, encoding=encoding
        )
        self.catalog = Catalog(self.config.data_dir, encoding=self.config.encoding)
        self.scheduler: FlushScheduler | None = None
        if self.config.scheduler_enabled:
            self.scheduler = FlushScheduler(
                self.catalog.flush_all, interval=self.config.flush_interval
            )
            if autostart:
                self.scheduler.start()
        self._closed = False

    # ------------------------------------------------------------------
    # Store operations
    # ------------------------------------------------------------------

    def exists(self, name: str) -> bool:
        return self.catalog.table_exists(name)

    def create(self, name: str, schema: Sequence[str]) -> None:
        self.catalog.create_table(name, schema)

    def create_if_absent(self, name: str, schema: Sequence[str]) -> None:
        self.catalog.create_if_absent(name, schema)

    def add_row(self, name: str, row: Sequence[Any]) -> int:
        return self.catalog.add_row(name, row)

    def delete_row(self, name: str, position: int) -> None:
        self.catalog.delete_row(name, position)

    def update_cell(self, name: str, position: int, column: str, value: Any) -> None:
        self.catalog.update_cell(name, position, column, value)

    def lookup_by_value(self, name: str, column: str, value: Any) -> set[int]:
        return self.catalog.lookup_by_value(name, column, value)

    def read_cell(self, name: str, position: int, column: str) -> Any:
        return self.catalog.read_cell(name, position, column)

    def rows(self, name: str) -> list[Row]:
        return self.catalog.rows(name)

    def schema(self, name: str) -> list[str]:
        return self.catalog.schema(name)

    def list_tables(self) -> list[str]:
        return self.catalog.list_tables()

    def flush_all(self) -> int:
        return self.catalog.flush_all()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Stop the scheduler and flush all dirty tables."""
        if self._closed:
            return
        if self.scheduler is not None:
            self.scheduler.stop()
        saved = self.catalog.flush_all()
        logger.info("Closed store at %s (%d tables flushed)", self.catalog.data_dir, saved)
        self._closed = True

    def __enter__(self) -> "BotDB":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __repr__(self) -> str:
        tables = ", ".join(self.list_tables()) or "(none)"
        return f"BotDB(dir={str(self.catalog.data_dir)!r}, tables=[{tables}])"
