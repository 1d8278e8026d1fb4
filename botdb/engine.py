"""
botdb/engine.py
CommandEngine: ties the command parser to a BotDB for execution.

Returns:
  - SHOW   → list[dict]   one dict per row, position under "#"
  - ADD    → {"status": "OK", "position": n}
  - LOOKUP → {"status": "OK", "positions": [sorted positions]}
  - GET    → {"status": "OK", "value": v}
  - FLUSH  → {"status": "OK", "flushed": n}
  - others → {"status": "OK"}

Every failure surfaces as CommandError; `kind` is "parse" for bad
command lines and the StoreError kind for store failures.
"""

from __future__ import annotations
from typing import Any

from botdb.db import BotDB
from botdb.errors import StoreError
from botdb.lexer import LexError
from botdb.parser import (
    parse,
    Command,
    CreateCmd, EnsureCmd, AddCmd, DeleteCmd, UpdateCmd,
    LookupCmd, GetCmd, ShowCmd, FlushCmd,
    ParseError,
)

POSITION_COLUMN = "#"


class CommandError(Exception):
    """A command could not be parsed or the store rejected it."""

    def __init__(self, message: str, kind: str) -> None:
        super().__init__(message)
        self.kind = kind


class CommandEngine:
    def __init__(self, db: BotDB) -> None:
        self._db = db

    def execute(self, line: str) -> list[dict] | dict:
        try:
            cmd = parse(line)
        except (LexError, ParseError) as e:
            raise CommandError(f"Parse error: {e}", kind="parse") from e
        try:
            return self.run(cmd)
        except StoreError as e:
            raise CommandError(str(e), kind=e.kind) from e

    def run(self, cmd: Command) -> list[dict] | dict:
        db = self._db
        if isinstance(cmd, CreateCmd):
            db.create(cmd.table, cmd.columns)
        elif isinstance(cmd, EnsureCmd):
            db.create_if_absent(cmd.table, cmd.columns)
        elif isinstance(cmd, AddCmd):
            return _ok(position=db.add_row(cmd.table, cmd.values))
        elif isinstance(cmd, DeleteCmd):
            db.delete_row(cmd.table, cmd.position)
        elif isinstance(cmd, UpdateCmd):
            db.update_cell(cmd.table, cmd.position, cmd.column, cmd.value)
        elif isinstance(cmd, LookupCmd):
            return _ok(positions=sorted(db.lookup_by_value(cmd.table, cmd.column, cmd.value)))
        elif isinstance(cmd, GetCmd):
            return _ok(value=db.read_cell(cmd.table, cmd.position, cmd.column))
        elif isinstance(cmd, ShowCmd):
            return self._show(cmd.table)
        elif isinstance(cmd, FlushCmd):
            return _ok(flushed=db.flush_all())
        else:
            raise CommandError(f"Unsupported command type: {type(cmd)}", kind="parse")
        return _ok()

    def _show(self, table: str) -> list[dict]:
        columns = self._db.schema(table)
        return [
            {POSITION_COLUMN: pos, **dict(zip(columns, row))}
            for pos, row in enumerate(self._db.rows(table))
        ]


def _ok(**extra: Any) -> dict:
    return {"status": "OK", **extra}
