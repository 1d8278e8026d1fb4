"""
botdb/config.py
StoreConfig: runtime settings for a BotDB instance.

Precedence is explicit overrides > environment > defaults:

  BOTDB_DATA_DIR         directory holding one file per table   ("data")
  BOTDB_FLUSH_INTERVAL   seconds between background flushes     (50)
  BOTDB_ENCODING         "structured" or "raw"                  ("structured")
  BOTDB_LOG_LEVEL        level name used by the shell           ("WARNING")

A flush interval <= 0 disables the background scheduler; tables are then
only written by explicit flush_all() calls and on close().
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from botdb.codec import ENCODINGS

DEFAULT_DATA_DIR = "data"
DEFAULT_FLUSH_INTERVAL = 50.0
DEFAULT_ENCODING = "structured"
DEFAULT_LOG_LEVEL = "WARNING"

ENV_PREFIX = "BOTDB_"


class ConfigError(ValueError):
    """Invalid configuration value."""


@dataclass(frozen=True)
class StoreConfig:
    data_dir: str | Path = DEFAULT_DATA_DIR
    flush_interval: float = DEFAULT_FLUSH_INTERVAL
    encoding: str = DEFAULT_ENCODING
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        if self.encoding not in ENCODINGS:
            raise ConfigError(
                f"encoding must be one of {sorted(ENCODINGS)}, got {self.encoding!r}"
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"Unknown log level: {self.log_level!r}")

    @property
    def scheduler_enabled(self) -> bool:
        return self.flush_interval > 0

    def with_overrides(self, **overrides: Any) -> StoreConfig:
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if "flush_interval" in values:
            values["flush_interval"] = _parse_interval(values["flush_interval"])
        return replace(self, **values)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StoreConfig:
        env = os.environ if environ is None else environ
        return cls().with_overrides(
            data_dir=env.get(ENV_PREFIX + "DATA_DIR"),
            flush_interval=env.get(ENV_PREFIX + "FLUSH_INTERVAL"),
            encoding=env.get(ENV_PREFIX + "ENCODING"),
            log_level=env.get(ENV_PREFIX + "LOG_LEVEL"),
        )


def _parse_interval(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"flush_interval must be a number, got {value!r}") from e
