"""
Logging configuration — set up once by the CLI entry point.

Every module that does ``logger = logging.getLogger(__name__)`` inherits
this config. Install progress is logged at INFO, so INFO is the default
and uses the bare message format; DEBUG adds time and file:line.

Levels are resolved in precedence order:
    --debug  >  --quiet  >  DYNAMIC_PLUGINS_LOG_LEVEL  >  INFO

Optional file output via DYNAMIC_PLUGINS_LOG_FILE /
DYNAMIC_PLUGINS_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import sys

ENV_LOG_LEVEL = "DYNAMIC_PLUGINS_LOG_LEVEL"
ENV_LOG_FILE = "DYNAMIC_PLUGINS_LOG_FILE"
ENV_LOG_FILE_LEVEL = "DYNAMIC_PLUGINS_LOG_FILE_LEVEL"

DEFAULT_LEVEL = "INFO"

# INFO and above: progress lines exactly as written
_FMT_MINIMAL = "%(message)s"

# DEBUG: full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# File output: always full detail
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    debug: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> str:
    """Pick the console level from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if quiet:
        return "ERROR"
    return env_level or DEFAULT_LEVEL


def setup_logging(
    level: str = DEFAULT_LEVEL,
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        formatter = logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_DEBUG)
    else:
        formatter = logging.Formatter(_FMT_MINIMAL)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.INFO
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric
