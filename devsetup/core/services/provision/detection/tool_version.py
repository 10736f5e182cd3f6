"""
L3 Detection — Installed tool versions.

Used for the verification summary at the end of a pipeline.
Runtimes managed by mise may not be on PATH in this process yet,
so a missing command is retried through ``mise exec --``.
"""

from __future__ import annotations

import shutil
import subprocess

from devsetup.core.services.provision.detection.probes import find_mise


def get_tool_version(cmd: list[str], *, timeout: int = 15) -> str | None:
    """Run a version command and return its first output line.

    Returns:
        The version line, or None when the tool is unavailable.
    """
    argv = list(cmd)
    if shutil.which(argv[0]) is None:
        mise = find_mise()
        if mise is None:
            return None
        argv = [mise, "exec", "--"] + argv

    try:
        r = subprocess.run(argv, capture_output=True, text=True, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired):
        return None
    if r.returncode != 0:
        return None
    # Some tools (python 2, java) print their version on stderr.
    out = (r.stdout or r.stderr).strip()
    return out.splitlines()[0] if out else None
