"""
L4 Execution — Backup-then-overwrite for user config files.

A pre-existing file is copied byte for byte to
``<file>.backup.YYYYMMDD_HHMMSS`` in the same directory before the
new content replaces it.  The replacement itself is atomic: content
is written to a temp file next to the target and renamed over it,
so an interrupted run never leaves a half-written config.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
from pathlib import Path

from devsetup.core.context import is_dry_run

logger = logging.getLogger(__name__)


def backup_file(path: Path, *, timestamp: str | None = None) -> Path | None:
    """Copy ``path`` to a timestamped sibling.

    Returns:
        The backup path, or None when ``path`` does not exist.
    """
    if not path.is_file():
        logger.debug("backup: path does not exist, skipping: %s", path)
        return None

    ts = timestamp or time.strftime("%Y%m%d_%H%M%S")
    dest = path.with_name(f"{path.name}.backup.{ts}")
    # Two backups in the same second must not clobber each other.
    counter = 1
    while dest.exists():
        dest = path.with_name(f"{path.name}.backup.{ts}.{counter}")
        counter += 1

    if is_dry_run():
        logger.info("[dry-run] back up %s → %s", path, dest)
        return dest

    shutil.copy2(path, dest)
    logger.info("Backed up %s → %s", path, dest)
    return dest


def atomic_write(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` without a partial-file window."""
    if is_dry_run():
        logger.info("[dry-run] write %s (%d bytes)", path, len(content))
        return

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def replace_with_backup(path: Path, content: str) -> Path | None:
    """Back up ``path`` (if present) and atomically write ``content``.

    Returns:
        The backup path, or None when there was nothing to back up.
    """
    backup = backup_file(path)
    atomic_write(path, content)
    return backup
