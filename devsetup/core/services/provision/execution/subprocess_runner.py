"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called for mutating
operations.  Privilege escalation, dry-run, logging and error
capture are centralised here.  Read-only probes live in the
detection layer and do not come through this module.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from typing import Any

from devsetup.core.context import is_dry_run

logger = logging.getLogger(__name__)

# Package installs on a cold mirror can take a long time.
DEFAULT_TIMEOUT = 1800


def _is_root() -> bool:
    return os.geteuid() == 0


def run_command(
    cmd: list[str],
    *,
    needs_sudo: bool = False,
    timeout: int = DEFAULT_TIMEOUT,
    env_overrides: dict[str, str] | None = None,
    cwd: str | None = None,
    interactive: bool = False,
) -> dict[str, Any]:
    """Run a mutating command and capture its outcome.

    Sudo credentials are expected to be cached already (see
    ``sudo_keepalive``); the command is simply prefixed with
    ``sudo`` when root is required and we are not root.

    Args:
        cmd: Command list for ``subprocess.run()``.
        needs_sudo: Whether the command requires root.
        timeout: Seconds before ``TimeoutExpired``.
        env_overrides: Extra env vars for the child process.
            Not forwarded through sudo; put them in ``cmd`` via
            ``env NAME=VALUE`` for privileged commands.
        cwd: Working directory for the command.
        interactive: Inherit the terminal instead of capturing output
            (for commands that prompt, e.g. ``chsh``).

    Returns:
        ``{"ok": True, "stdout": "...", "elapsed_ms": N}`` on success,
        ``{"ok": False, "error": "...", "return_code": N, ...}`` on failure.
        In dry-run mode: ``{"ok": True, "dry_run": True, "stdout": ""}``.
    """
    if needs_sudo and not _is_root():
        cmd = ["sudo"] + cmd

    printable = shlex.join(cmd)

    if is_dry_run():
        logger.info("[dry-run] %s", printable)
        return {"ok": True, "dry_run": True, "stdout": "", "cmd": printable}

    env = None
    if env_overrides:
        env = os.environ.copy()
        for key, value in env_overrides.items():
            env[key] = os.path.expandvars(value)

    logger.info("Running: %s", printable)
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            capture_output=not interactive,
            text=True,
            timeout=timeout,
            env=env,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        return {
            "ok": False,
            "error": f"Command timed out ({timeout}s): {printable}",
            "cmd": printable,
        }
    except FileNotFoundError:
        return {
            "ok": False,
            "error": f"Command not found: {cmd[0]}",
            "return_code": 127,
            "cmd": printable,
        }
    except OSError as e:
        logger.exception("Subprocess error: %s", printable)
        return {"ok": False, "error": str(e), "cmd": printable}

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout[-2000:] if result.stdout else ""

    if result.returncode == 0:
        return {"ok": True, "stdout": stdout, "elapsed_ms": elapsed_ms}

    stderr = result.stderr[-2000:] if result.stderr else ""
    logger.debug("Command failed (exit %d): %s\n%s", result.returncode, printable, stderr)
    return {
        "ok": False,
        "error": f"Command failed (exit {result.returncode}): {printable}",
        "return_code": result.returncode,
        "stderr": stderr,
        "stdout": stdout,
        "elapsed_ms": elapsed_ms,
        "cmd": printable,
    }


def run_pipeline(script: str, **kwargs: Any) -> dict[str, Any]:
    """Run a shell pipeline (``curl URL | sh``) under bash with pipefail.

    Used only for vendor-provided install scripts, which are a
    trust boundary: nothing is verified before execution.
    """
    return run_command(["bash", "-o", "pipefail", "-c", script], **kwargs)
