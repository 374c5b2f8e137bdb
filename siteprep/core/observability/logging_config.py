"""
Logging configuration for the siteprep CLI.

``setup_logging`` runs once from the top-level click group; modules just
do ``logger = logging.getLogger(__name__)``.

Console level: ``--debug`` / ``--verbose`` / ``--quiet`` if given, else
SITEPREP_LOG_LEVEL, else WARNING. A transcript file can be added with
SITEPREP_LOG_FILE (level SITEPREP_LOG_FILE_LEVEL, default: console level).
Installer runs take minutes, so the transcript is opened in append mode and
every run is stamped with its process id.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

ENV_LEVEL = "SITEPREP_LOG_LEVEL"
ENV_FILE = "SITEPREP_LOG_FILE"
ENV_FILE_LEVEL = "SITEPREP_LOG_FILE_LEVEL"

# (most verbose level the format applies to, format, date format)
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_DEFAULT = "%(levelname)s: %(message)s"

_TRANSCRIPT_FORMAT = "%(asctime)s %(levelname)-7s [%(process)d] %(name)s:%(lineno)d  %(message)s"
_TRANSCRIPT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str | None = None,
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Install the console handler and, optionally, the transcript file.

    Args:
        level: Level name from a CLI flag; ``None`` falls back to
            SITEPREP_LOG_LEVEL.
        log_file: Transcript path; ``None`` falls back to SITEPREP_LOG_FILE.
        log_file_level: Transcript level; ``None`` falls back to
            SITEPREP_LOG_FILE_LEVEL, then to the console level.
    """
    console_level = _parse_level(level or os.environ.get(ENV_LEVEL))
    log_file = log_file or os.environ.get(ENV_FILE) or None
    log_file_level = log_file_level or os.environ.get(ENV_FILE_LEVEL)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(console_formatter(console_level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root.addHandler(_transcript_handler(Path(log_file), file_level))
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def console_formatter(level: int) -> logging.Formatter:
    """Formatter for the console handler at ``level``.

    DEBUG shows source locations, INFO adds time and logger name, anything
    quieter prints the level and message only.
    """
    for most_verbose, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= most_verbose:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter(_CONSOLE_DEFAULT)


def _transcript_handler(path: Path, level: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_TRANSCRIPT_FORMAT, datefmt=_TRANSCRIPT_DATEFMT))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name to number; unknown or empty names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = logging.getLevelName(level.strip().upper())
    return numeric if isinstance(numeric, int) else logging.WARNING
