"""
Logging configuration for the devsetup process.

``main.py`` resolves a level with ``resolve_level`` and calls
``setup_logging`` once.  Modules log through
``logging.getLogger(__name__)`` and inherit the root handlers.

The console stays terse because click already prints one progress
line per step; logging carries the commands run, probe results and
failure details.  A long unattended run is best paired with a DEBUG
log file (``DEVSETUP_LOG_FILE``) next to a quiet console.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

LEVEL_ENV_VAR = "DEVSETUP_LOG_LEVEL"
FILE_ENV_VAR = "DEVSETUP_LOG_FILE"
FILE_LEVEL_ENV_VAR = "DEVSETUP_LOG_FILE_LEVEL"

# Console: bare message unless the operator asked for more.
_CONSOLE_FMT = "%(message)s"
_CONSOLE_DETAIL_FMT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
_CONSOLE_DATEFMT = "%H:%M:%S"

# File: always full detail, with the source line for failed steps.
_FILE_FMT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """CLI flag, then ``DEVSETUP_LOG_LEVEL``, then WARNING."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LEVEL_ENV_VAR, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Install the console handler and, optionally, a file handler.

    ``log_file`` and ``log_file_level`` default to the
    ``DEVSETUP_LOG_FILE`` and ``DEVSETUP_LOG_FILE_LEVEL`` env vars.
    The file level defaults to ``level``.
    """
    log_file = log_file or os.environ.get(FILE_ENV_VAR)
    log_file_level = log_file_level or os.environ.get(FILE_LEVEL_ENV_VAR)
    console_level = _parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    if console_level <= logging.INFO:
        console.setFormatter(logging.Formatter(_CONSOLE_DETAIL_FMT, datefmt=_CONSOLE_DATEFMT))
    else:
        console.setFormatter(logging.Formatter(_CONSOLE_FMT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root_level = min(root_level, file_level)

        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_FILE_DATEFMT))
        root.addHandler(fh)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    numeric = getattr(logging, level.upper(), None) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
