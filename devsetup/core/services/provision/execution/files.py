"""
L4 Execution — File placement.

Privileged writes (apt sources, keyrings, daemon config) and the
user configuration directories.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any

from devsetup.core.context import is_dry_run
from devsetup.core.services.provision.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)


def write_root_file(dest: str, content: str, *, mode: str = "0644") -> dict[str, Any]:
    """Write ``content`` to a root-owned path.

    The content is staged in a temp file and copied into place with
    ``install -D`` under sudo, which also creates missing parents.
    """
    with tempfile.NamedTemporaryFile("w", encoding="utf-8", suffix=".tmp", delete=False) as tmp:
        tmp.write(content)
        staged = tmp.name
    try:
        return run_command(
            ["install", "-D", "-m", mode, staged, dest],
            needs_sudo=True,
            timeout=60,
        )
    finally:
        Path(staged).unlink(missing_ok=True)


def ensure_directories(paths: list[str]) -> list[Path]:
    """Create each directory that does not exist yet.

    Returns:
        The directories that were created (empty on a second run).
    """
    created: list[Path] = []
    for raw in paths:
        path = Path(raw).expanduser()
        if path.is_dir():
            continue
        if is_dry_run():
            logger.info("[dry-run] mkdir -p %s", path)
        else:
            path.mkdir(parents=True, exist_ok=True)
            logger.info("Created configuration directory: %s", path)
        created.append(path)
    return created
