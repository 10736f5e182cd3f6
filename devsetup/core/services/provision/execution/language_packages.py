"""
L4 Execution — Language package installers (npm, pip).

Same probe-then-install pattern as OS packages, driven by each
ecosystem's own package manager.  Runtimes installed by mise are
not on PATH until the shell is re-activated, so when the ecosystem
tool is missing the command is run through ``mise exec --``.
"""

from __future__ import annotations

import logging
import shutil

from devsetup.core.models.action import Receipt
from devsetup.core.services.provision.detection.probes import (
    find_mise,
    is_npm_package_installed,
    is_pip_package_installed,
)
from devsetup.core.services.provision.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)


def tool_command(tool: str) -> list[str]:
    """Resolve how to invoke ``tool``: directly, or through mise."""
    if shutil.which(tool):
        return [tool]
    mise = find_mise()
    if mise:
        return [mise, "exec", "--", tool]
    return [tool]


def install_npm_package(pkg: str) -> Receipt:
    """``npm install -g PKG`` unless already installed globally."""
    step = f"npm:{pkg}"
    npm = tool_command("npm")

    if is_npm_package_installed(pkg, npm):
        logger.info("✓ %s is already installed globally", pkg)
        return Receipt.skip(step, f"{pkg} is already installed globally")

    result = run_command(npm + ["install", "-g", pkg], timeout=600)
    return Receipt.from_run(step, result, output=f"Installed {pkg} globally")


def install_pip_package(pkg: str) -> Receipt:
    """``pip install PKG`` unless ``pip show`` already finds it."""
    step = f"pip:{pkg}"
    pip = tool_command("pip")

    if is_pip_package_installed(pkg, pip):
        logger.info("✓ %s is already installed", pkg)
        return Receipt.skip(step, f"{pkg} is already installed")

    result = run_command(pip + ["install", pkg], timeout=600)
    return Receipt.from_run(step, result, output=f"Installed {pkg}")
