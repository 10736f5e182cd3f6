"""
L4 Execution — Version-manager bridge (mise).

Language runtimes are not installed directly: they are delegated to
mise, which is bootstrapped from its vendor install script when it
is missing.  Runtimes are selected by channel (``lts``, ``latest``,
``stable``) only, so a later run may land on a newer concrete
version than an earlier one.
"""

from __future__ import annotations

import logging
from pathlib import Path

from devsetup.core.context import is_dry_run
from devsetup.core.models.action import Receipt
from devsetup.core.models.target import RuntimeSpec
from devsetup.core.services.provision.data.catalog import (
    MISE_ACTIVATE_LINE,
    MISE_INSTALL_URL,
    MISE_LOCAL_BIN,
    SHELL_RC_FILE,
)
from devsetup.core.services.provision.detection.probes import find_mise, mise_resolves
from devsetup.core.services.provision.execution.subprocess_runner import (
    run_command,
    run_pipeline,
)

logger = logging.getLogger(__name__)


def append_activation(rc_file: str = SHELL_RC_FILE, line: str = MISE_ACTIVATE_LINE) -> bool:
    """Append the activation line to the shell startup file.

    Returns:
        True if the file was changed, False if the line was already there.
    """
    path = Path(rc_file).expanduser()
    existing = path.read_text(encoding="utf-8") if path.is_file() else ""
    if line in existing.splitlines():
        return False
    if is_dry_run():
        logger.info("[dry-run] append activation line to %s", path)
        return True
    with open(path, "a", encoding="utf-8") as f:
        if existing and not existing.endswith("\n"):
            f.write("\n")
        f.write(line + "\n")
    logger.info("Added mise activation to %s", path)
    return True


def ensure_version_manager(*, rc_file: str = SHELL_RC_FILE) -> Receipt:
    """Make sure mise is installed and activated for interactive shells."""
    step = "version-manager:mise"

    if find_mise():
        logger.info("✓ mise is already installed")
        return Receipt.skip(step, "mise is already installed")

    result = run_pipeline(f"curl -fsSL {MISE_INSTALL_URL} | sh")
    if not result["ok"]:
        return Receipt.from_run(step, result)

    if not is_dry_run() and find_mise() is None:
        return Receipt.failure(
            step,
            error=f"mise install script finished but {MISE_LOCAL_BIN} is missing",
        )

    try:
        append_activation(rc_file)
    except OSError as exc:
        return Receipt.failure(step, error=f"Cannot update {rc_file}: {exc}")

    return Receipt.success(step, output="Installed mise")


def install_runtime(runtime: RuntimeSpec) -> Receipt:
    """Install one runtime through mise unless mise already provides it."""
    step = f"runtime:{runtime.tool}"

    mise = find_mise()
    if mise is None:
        if is_dry_run():
            # mise would have been bootstrapped by the previous step.
            mise = str(Path(MISE_LOCAL_BIN).expanduser())
        else:
            return Receipt.failure(step, error="mise is not installed")

    if mise_resolves(mise, runtime.probe_command):
        logger.info("✓ %s is already set up with mise", runtime.tool)
        return Receipt.skip(step, f"{runtime.tool} is already set up with mise")

    for args in (["use", "--global", runtime.selector], ["install", runtime.selector]):
        result = run_command([mise] + args)
        if not result["ok"]:
            return Receipt.from_run(step, result)

    return Receipt.success(step, output=f"Installed {runtime.selector}")
