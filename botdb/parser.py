"""
botdb/parser.py
Recursive-descent parser for shell commands.

Produces a single command node per line.

Grammar (command names are case-insensitive):
  command  = create | ensure | add | delete | update
           | lookup | get | show | flush                 [;]
  create   = CREATE table column+
  ensure   = ENSURE table column+
  add      = ADD table value+
  delete   = DELETE table position
  update   = UPDATE table position column value
  lookup   = LOOKUP table column value
  get      = GET table position column
  show     = SHOW table
  flush    = FLUSH

  table    = WORD
  column   = WORD
  position = NUMBER (integer)
  value    = NUMBER | STRING | TRUE | FALSE | NULL | WORD
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from botdb.lexer import Token, TokenType, tokenize


# ── Command nodes ─────────────────────────────────────────────────────

@dataclass
class CreateCmd:
    table: str
    columns: list[str]


@dataclass
class EnsureCmd:
    table: str
    columns: list[str]


@dataclass
class AddCmd:
    table: str
    values: list[Any]


@dataclass
class DeleteCmd:
    table: str
    position: int


@dataclass
class UpdateCmd:
    table: str
    position: int
    column: str
    value: Any


@dataclass
class LookupCmd:
    table: str
    column: str
    value: Any


@dataclass
class GetCmd:
    table: str
    position: int
    column: str


@dataclass
class ShowCmd:
    table: str


@dataclass
class FlushCmd:
    pass


Command = (
    CreateCmd | EnsureCmd | AddCmd | DeleteCmd | UpdateCmd
    | LookupCmd | GetCmd | ShowCmd | FlushCmd
)

# Bare words with a literal meaning in value position
_WORD_LITERALS: dict[str, Any] = {"TRUE": True, "FALSE": False, "NULL": None}


class ParseError(Exception):
    pass


# ── Parser ────────────────────────────────────────────────────────────

class Parser:
    """Recursive-descent parser. Produces a single command node per call."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> Command:
        tok = self._peek()
        if tok.type == TokenType.EOF:
            raise ParseError("Empty command")
        if tok.type != TokenType.WORD:
            raise ParseError(f"Expected command name, got {tok.value!r}")

        name = tok.value.upper()
        handler = getattr(self, f"_parse_{name.lower()}", None)
        if name not in _COMMANDS or handler is None:
            raise ParseError(f"Unknown command: {tok.value!r}")
        self._advance()
        cmd = handler()

        self._skip_optional(TokenType.SYMBOL, ";")
        self._expect(TokenType.EOF)
        return cmd

    # ── Command parsers ───────────────────────────────────────────────

    def _parse_create(self) -> CreateCmd:
        return CreateCmd(table=self._parse_name(), columns=self._parse_column_list())

    def _parse_ensure(self) -> EnsureCmd:
        return EnsureCmd(table=self._parse_name(), columns=self._parse_column_list())

    def _parse_add(self) -> AddCmd:
        table = self._parse_name()
        values = [self._parse_value()]
        while not self._at_end():
            values.append(self._parse_value())
        return AddCmd(table=table, values=values)

    def _parse_delete(self) -> DeleteCmd:
        return DeleteCmd(table=self._parse_name(), position=self._parse_position())

    def _parse_update(self) -> UpdateCmd:
        table = self._parse_name()
        position = self._parse_position()
        column = self._parse_name()
        return UpdateCmd(table=table, position=position, column=column, value=self._parse_value())

    def _parse_lookup(self) -> LookupCmd:
        table = self._parse_name()
        column = self._parse_name()
        return LookupCmd(table=table, column=column, value=self._parse_value())

    def _parse_get(self) -> GetCmd:
        table = self._parse_name()
        position = self._parse_position()
        return GetCmd(table=table, position=position, column=self._parse_name())

    def _parse_show(self) -> ShowCmd:
        return ShowCmd(table=self._parse_name())

    def _parse_flush(self) -> FlushCmd:
        return FlushCmd()

    # ── Sub-parsers ───────────────────────────────────────────────────

    def _parse_name(self) -> str:
        return self._expect(TokenType.WORD).value

    def _parse_column_list(self) -> list[str]:
        cols = [self._parse_name()]
        while not self._at_end():
            cols.append(self._parse_name())
        return cols

    def _parse_position(self) -> int:
        tok = self._expect(TokenType.NUMBER)
        if "." in tok.value:
            raise ParseError(f"Row position must be an integer, got {tok.value!r}")
        return int(tok.value)

    def _parse_value(self) -> Any:
        tok = self._peek()
        if tok.type == TokenType.NUMBER:
            self._advance()
            s = tok.value
            return float(s) if "." in s else int(s)
        if tok.type == TokenType.STRING:
            self._advance()
            return tok.value
        if tok.type == TokenType.WORD:
            self._advance()
            return _WORD_LITERALS.get(tok.value.upper(), tok.value)
        raise ParseError(f"Expected a value, got {tok.type.name} {tok.value!r}")

    # ── Token-stream helpers ──────────────────────────────────────────

    def _peek(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        self._pos += 1
        return tok

    def _at_end(self) -> bool:
        tok = self._peek()
        return tok.type == TokenType.EOF or (tok.type == TokenType.SYMBOL and tok.value == ";")

    def _expect(self, ttype: TokenType) -> Token:
        tok = self._peek()
        if tok.type != ttype:
            raise ParseError(
                f"Expected {ttype.name}, got {tok.type.name} {tok.value!r} at pos {tok.pos}"
            )
        return self._advance()

    def _skip_optional(self, ttype: TokenType, value: str) -> None:
        tok = self._peek()
        if tok.type == ttype and tok.value == value:
            self._advance()


_COMMANDS = frozenset({
    "CREATE", "ENSURE", "ADD", "DELETE", "UPDATE",
    "LOOKUP", "GET", "SHOW", "FLUSH",
})


def parse(line: str) -> Command:
    """Convenience function: tokenize and parse a command line."""
    return Parser(tokenize(line)).parse()
