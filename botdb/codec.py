"""
botdb/codec.py
Row codec: converts rows to and from the on-disk text format.

File layout (one file per table):

  name species \n        header: column names joined by single spaces
  "Rex"\n                row 0, column 0
  "dog"\n                row 0, column 1
  "Mimi"\n               row 1, column 0
  "cat"\n                row 1, column 1

There is no row delimiter: the body is chunked with a stride equal to the
column count, so a body whose line count is not a multiple of it is
corrupt.

Two value encodings are supported:

  structured (default)  every value is a JSON literal on its own line.
                        Strings may contain any character (newlines are
                        escaped), and int / float / bool / None / list /
                        dict values survive a round trip.
  raw                   values are bare strings written as-is; a value
                        containing a line break would corrupt the file,
                        so such values are rejected.
"""

from __future__ import annotations
import json
import math
from typing import Any, Iterable, Sequence

from botdb.errors import CorruptionError, InvalidDataError

STRUCTURED = "structured"
RAW = "raw"
ENCODINGS = frozenset({STRUCTURED, RAW})

Row = list[Any]


# ── Value domain ──────────────────────────────────────────────────────

def validate_value(value: Any, encoding: str = STRUCTURED) -> None:
    """Raise InvalidDataError unless `value` can be stored under `encoding`."""
    if encoding == RAW:
        if not isinstance(value, str):
            raise InvalidDataError(
                f"raw encoding only stores strings, got {type(value).__name__}"
            )
        if "\n" in value or "\r" in value:
            raise InvalidDataError("raw encoding cannot store line breaks")
        _check_encodable(value)
        return
    _validate_structured(value)


def _check_encodable(text: str) -> None:
    # Files are written as UTF-8; lone surrogates would fail at flush time.
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidDataError(f"string {text!r} is not valid unicode") from None


def _validate_structured(value: Any) -> None:
    if isinstance(value, str):
        _check_encodable(value)
        return
    if value is None or isinstance(value, (bool, int)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidDataError(f"non-finite float {value!r} cannot be stored")
        return
    if isinstance(value, list):
        for item in value:
            _validate_structured(item)
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidDataError(
                    f"mapping keys must be strings, got {type(key).__name__}"
                )
            _check_encodable(key)
            _validate_structured(item)
        return
    raise InvalidDataError(f"unsupported value type: {type(value).__name__}")


def index_key(value: Any) -> str:
    """
    Canonical, hashable form of a value used as an index bucket key.
    Type-sensitive: 1, 1.0, True and "1" all map to different keys.
    """
    return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


# ── Single values / rows ──────────────────────────────────────────────

def encode_value(value: Any, encoding: str = STRUCTURED) -> str:
    if encoding == RAW:
        return value
    return json.dumps(value, ensure_ascii=False, allow_nan=False, separators=(",", ":"))


def decode_value(line: str, encoding: str = STRUCTURED) -> Any:
    if encoding == RAW:
        return line
    try:
        return json.loads(line)
    except json.JSONDecodeError as e:
        raise CorruptionError(f"Undecodable value {line!r}: {e}") from e


def encode(row: Sequence[Any], encoding: str = STRUCTURED) -> list[str]:
    """Return one line (without newline) per value of `row`."""
    return [encode_value(v, encoding) for v in row]


def decode(
    lines: Sequence[str], schema: Sequence[str], encoding: str = STRUCTURED
) -> list[Row]:
    """Chunk `lines` into rows of len(schema) values each."""
    width = len(schema)
    if width == 0:
        raise CorruptionError("Cannot decode rows for an empty schema")
    if len(lines) % width != 0:
        raise CorruptionError(
            f"{len(lines)} value lines is not a multiple of {width} columns"
        )
    rows: list[Row] = []
    for start in range(0, len(lines), width):
        rows.append([decode_value(line, encoding) for line in lines[start: start + width]])
    return rows


# ── Whole tables ──────────────────────────────────────────────────────

def dump_table(
    schema: Sequence[str], rows: Iterable[Sequence[Any]], encoding: str = STRUCTURED
) -> str:
    """Serialise a header plus all rows; the result ends with a newline."""
    lines = [" ".join(schema)]
    for row in rows:
        lines.extend(encode(row, encoding))
    return "\n".join(lines) + "\n"


def load_table(text: str, encoding: str = STRUCTURED) -> tuple[list[str], list[Row]]:
    """Parse file contents into (schema, rows)."""
    if text.endswith("\n"):
        text = text[:-1]
    if encoding == STRUCTURED:
        text = text.strip()
    lines = text.split("\n")
    schema = lines[0].split()
    if not schema:
        raise CorruptionError("Missing column header")
    if len(set(schema)) != len(schema):
        raise CorruptionError(f"Duplicate column names in header: {schema}")
    body = lines[1:]
    if encoding == STRUCTURED:
        body = [line.strip() for line in body]
    return schema, decode(body, schema, encoding)
