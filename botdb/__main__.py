"""
botdb/__main__.py
Interactive shell for a botdb data directory.

Usage:
    python -m botdb                         # ./data (or $BOTDB_DATA_DIR)
    python -m botdb --data-dir ./mydata --flush-interval 10

Meta-commands:
    .help   : show help
    .tables : list tables
    .quit   : exit
    exit    : exit (also: quit, .exit, .quit)
"""

from __future__ import annotations
import argparse
import json
import logging

from botdb.config import ConfigError, StoreConfig
from botdb.db import BotDB
from botdb.engine import CommandEngine, CommandError

HELP = """
Meta-commands:
  .tables   List all tables
  .help     Show this help
  .quit     Exit  (also: exit, quit, .exit)

Commands:
  CREATE pets name species
  ENSURE pets name species
  ADD pets Rex dog
  ADD pets 'Mr. Whiskers' cat
  LOOKUP pets species dog
  GET pets 0 name
  UPDATE pets 0 species cat
  DELETE pets 0
  SHOW pets
  FLUSH
"""


class _QuitShell(Exception):
    pass


# ── ASCII table formatter ─────────────────────────────────────────────

def _cell(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _fmt_table(rows: list[dict]) -> str:
    if not rows:
        return "(0 rows)"
    cols = list(rows[0])
    cells = [[_cell(row[c]) for c in cols] for row in rows]
    widths = [max(len(c), *(len(r[i]) for r in cells)) for i, c in enumerate(cols)]

    def line(values: list[str]) -> str:
        return "| " + " | ".join(v.ljust(w) for v, w in zip(values, widths)) + " |"

    rule = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    body = [line(r) for r in cells]
    plural = "" if len(rows) == 1 else "s"
    return "\n".join([rule, line(cols), rule, *body, rule, f"({len(rows)} row{plural})"])


def _fmt_result(result: list | dict) -> str:
    if isinstance(result, list):
        return _fmt_table(result)
    status = result.get("status", "OK")
    if "position" in result:
        return f"{status}: row {result['position']}"
    if "positions" in result:
        return f"{status}: rows {', '.join(str(p) for p in result['positions'])}"
    if "value" in result:
        return _cell(result["value"])
    if "flushed" in result:
        n = result["flushed"]
        return f"{status}: {n} table{'s' if n != 1 else ''} flushed"
    return status


# ── REPL ─────────────────────────────────────────────────────────────

def run_repl(engine: CommandEngine, db: BotDB) -> None:
    print(f"botdb shell  (data={db.catalog.data_dir})  Type .help for help, exit or .quit to exit.")
    print()

    while True:
        try:
            line = input("botdb> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("exit", "quit"):
            print("Bye!")
            break

        try:
            if stripped.startswith("."):
                _handle_meta(stripped, db)
            else:
                print(_fmt_result(engine.execute(stripped)))
        except _QuitShell:
            print("Bye!")
            break
        except CommandError as e:
            print(f"Error ({e.kind}): {e}")


def _handle_meta(cmd: str, db: BotDB) -> None:
    cmd = cmd.lower().split()[0]
    if cmd in (".quit", ".exit"):
        raise _QuitShell()
    elif cmd == ".tables":
        tables = db.list_tables()
        if tables:
            for t in tables:
                print(f"  {t}")
        else:
            print("  (no tables)")
    elif cmd == ".help":
        print(HELP)
    else:
        print(f"Unknown meta-command: {cmd}")


# ── Entry point ───────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m botdb", description="botdb interactive shell")
    parser.add_argument("--data-dir", metavar="PATH", default=None,
                        help="Directory holding the table files (default: $BOTDB_DATA_DIR or ./data)")
    parser.add_argument("--flush-interval", metavar="SECONDS", type=float, default=None,
                        help="Seconds between background flushes; 0 disables (default: 50)")
    parser.add_argument("--encoding", choices=["structured", "raw"], default=None,
                        help="Value encoding of table files (default: structured)")
    parser.add_argument("--log-level", metavar="LEVEL", default=None,
                        help="Logging level (default: $BOTDB_LOG_LEVEL or WARNING)")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = StoreConfig.from_env().with_overrides(
            data_dir=args.data_dir,
            flush_interval=args.flush_interval,
            encoding=args.encoding,
            log_level=args.log_level,
        )
    except ConfigError as e:
        parser.error(str(e))
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db = BotDB(config)
    engine = CommandEngine(db)
    try:
        run_repl(engine, db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
