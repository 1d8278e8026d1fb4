"""
botdb/lexer.py
Lexer (tokenizer) for shell commands.

Converts a command line into a flat list of Tokens.
Supports:
  - Words: a letter or _ followed by letters, digits, _ - .
    (command names, table names, columns, bare string values)
  - Integer and float literals, optionally negative  (42, -1, 3.5)
  - Single-quoted string literals                   ('Rex', 'it''s ok')
  - The ; terminator
  - Comments: # … to end of line
  - Whitespace (silently skipped)
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    WORD     = auto()   # ADD, pets, species, dog
    NUMBER   = auto()   # 42, -1, 3.14
    STRING   = auto()   # 'hello world'
    SYMBOL   = auto()   # ;
    EOF      = auto()


_WORD_CHARS = frozenset("_-.")


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str          # raw text value (quotes removed for STRING)
    pos: int            # offset in the original line


class LexError(Exception):
    pass


class Lexer:
    def __init__(self, line: str) -> None:
        self._src = line
        self._pos = 0
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Return all tokens including a final EOF token."""
        while self._pos < len(self._src):
            self._skip_whitespace()
            if self._pos >= len(self._src):
                break
            ch = self._src[self._pos]

            if ch == "#":
                self._skip_comment()

            elif ch == "'":
                self._read_string()

            elif ch.isdigit() or (ch == "-" and self._peek().isdigit()):
                self._read_number()

            elif ch.isalpha() or ch == "_":
                self._read_word()

            elif ch == ";":
                self._emit(TokenType.SYMBOL, ch)
                self._pos += 1

            else:
                raise LexError(
                    f"Unexpected character {ch!r} at position {self._pos}"
                )

        self._emit(TokenType.EOF, "")
        return self._tokens

    # ── internal helpers ──────────────────────────────────────────────

    def _peek(self, offset: int = 1) -> str:
        idx = self._pos + offset
        return self._src[idx] if idx < len(self._src) else ""

    def _emit(self, ttype: TokenType, value: str) -> None:
        self._tokens.append(Token(ttype, value, self._pos))

    def _skip_whitespace(self) -> None:
        while self._pos < len(self._src) and self._src[self._pos].isspace():
            self._pos += 1

    def _skip_comment(self) -> None:
        while self._pos < len(self._src) and self._src[self._pos] != "\n":
            self._pos += 1

    def _read_string(self) -> None:
        start = self._pos
        self._pos += 1  # skip opening '
        buf: list[str] = []
        while self._pos < len(self._src):
            ch = self._src[self._pos]
            if ch == "'":
                if self._peek() == "'":
                    buf.append("'")
                    self._pos += 2
                else:
                    self._pos += 1  # skip closing '
                    self._tokens.append(Token(TokenType.STRING, "".join(buf), start))
                    return
            else:
                buf.append(ch)
                self._pos += 1
        raise LexError(f"Unterminated string literal at position {start}")

    def _read_number(self) -> None:
        start = self._pos
        if self._src[self._pos] == "-":
            self._pos += 1
        seen_dot = False
        while self._pos < len(self._src):
            ch = self._src[self._pos]
            if ch == "." and not seen_dot and self._peek().isdigit():
                seen_dot = True
            elif not ch.isdigit():
                break
            self._pos += 1
        self._tokens.append(Token(TokenType.NUMBER, self._src[start: self._pos], start))

    def _read_word(self) -> None:
        start = self._pos
        while self._pos < len(self._src) and (
            self._src[self._pos].isalnum() or self._src[self._pos] in _WORD_CHARS
        ):
            self._pos += 1
        self._tokens.append(Token(TokenType.WORD, self._src[start: self._pos], start))


def tokenize(line: str) -> list[Token]:
    """Convenience function: tokenize a command line."""
    return Lexer(line).tokenize()
