"""
botdb/errors.py
Classified failures raised by the store.

Every store-level failure derives from StoreError and carries a short
`kind` string so callers (the shell, bot commands) can decide between a
retry and a user-facing message without string matching.

  UnexistingError    table name unknown to the catalog
  DuplicationError   create on a table that already exists
  RangeError         row position outside [0, row_count)
  FindError          unknown column, or value absent from an index
  InvalidDataError   bad arity, value outside the domain, bad schema/name
  TypeMismatchError  argument of the wrong Python type
  CorruptionError    table file does not match the on-disk format

IndexInvariantError is deliberately not a StoreError: it signals a bug in
the store itself, not bad input.
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for classified store failures."""

    kind: str = "store"


class UnexistingError(StoreError):
    kind = "unexisting"

    def __init__(self, name: str) -> None:
        super().__init__(f"Table '{name}' does not exist")
        self.name = name


class DuplicationError(StoreError):
    kind = "duplication"

    def __init__(self, name: str) -> None:
        super().__init__(f"Table '{name}' already exists")
        self.name = name


class RangeError(StoreError):
    kind = "range"

    def __init__(self, position: int, row_count: int) -> None:
        super().__init__(
            f"Position {position} out of range (table has {row_count} rows)"
        )
        self.position = position
        self.row_count = row_count


class FindError(StoreError):
    kind = "find"

    def __init__(self, what: object, where: str) -> None:
        super().__init__(f"{what!r} not found in {where}")
        self.what = what
        self.where = where


class InvalidDataError(StoreError):
    kind = "invalid_data"


class TypeMismatchError(StoreError):
    kind = "type"

    def __init__(self, argument: str, expected: str, got: object) -> None:
        super().__init__(
            f"{argument} must be {expected}, got {type(got).__name__}"
        )
        self.argument = argument
        self.expected = expected


class CorruptionError(StoreError):
    kind = "corruption"


class IndexInvariantError(AssertionError):
    """An index bucket disagrees with the row data."""
