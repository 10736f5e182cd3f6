"""
L4 Execution — OS package installer.

Probe first; if the target is satisfied, no-op.  Otherwise install
through the detected package manager's non-interactive subcommand
with elevated privilege.
"""

from __future__ import annotations

import logging
from typing import Callable

from devsetup.core.models.action import Receipt
from devsetup.core.models.target import PlatformDescriptor, TargetPackage
from devsetup.core.services.provision.detection.probes import is_target_satisfied
from devsetup.core.services.provision.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)

_INSTALL_COMMANDS: dict[str, list[str]] = {
    "apt": ["env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y"],
    "dnf": ["dnf", "install", "-y"],
    "pacman": ["pacman", "-S", "--noconfirm", "--needed"],
}

_REFRESH_COMMANDS: dict[str, list[str]] = {
    "apt": ["apt-get", "update"],
    "pacman": ["pacman", "-Sy"],
}

_UPGRADE_COMMANDS: dict[str, list[str]] = {
    "apt": ["env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "upgrade", "-y"],
    "dnf": ["dnf", "upgrade", "-y"],
    "pacman": ["pacman", "-Syu", "--noconfirm"],
}


def install_command(pkg_manager: str, packages: list[str]) -> list[str]:
    """Build the non-interactive install command (without sudo)."""
    return _INSTALL_COMMANDS[pkg_manager] + list(packages)


def install_package(
    target: TargetPackage,
    platform: PlatformDescriptor,
    *,
    prepare: Callable[[], Receipt] | None = None,
) -> Receipt:
    """Ensure ``target`` is installed.

    ``prepare`` runs right before the install command, only when an
    install is actually needed (used to refresh the package index
    lazily, so a fully provisioned machine sees no mutation at all).

    Returns:
        skipped receipt when already satisfied or when the target has
        no package on this platform; ok/failed receipt otherwise.
    """
    step = f"package:{target.name}"
    pm = platform.package_manager

    if is_target_satisfied(target, platform):
        logger.info("✓ %s is already installed", target.name)
        return Receipt.skip(step, f"{target.name} is already installed")

    names = target.names_for(pm)
    if not names:
        logger.warning("%s has no package for %s, skipping", target.name, pm)
        return Receipt.skip(
            step,
            f"{target.name} is not available via {pm}",
            metadata={"unavailable": True},
        )

    if prepare is not None:
        prepared = prepare()
        if prepared.failed:
            return Receipt.failure(
                step,
                error=f"Cannot install {target.name}: {prepared.error}",
                return_code=prepared.return_code,
            )

    logger.info("Installing %s (%s) via %s", target.name, " ".join(names), pm)
    result = run_command(install_command(pm, names), needs_sudo=True)
    return Receipt.from_run(step, result, output=f"Installed {' '.join(names)}")


def refresh_package_index(platform: PlatformDescriptor) -> Receipt:
    """Refresh the package index (``apt-get update`` / ``pacman -Sy``).

    dnf refreshes metadata on demand, so there is nothing to do.
    """
    step = "package-index"
    cmd = _REFRESH_COMMANDS.get(platform.package_manager)
    if cmd is None:
        return Receipt.skip(step, f"{platform.package_manager} needs no index refresh")

    result = run_command(cmd, needs_sudo=True)
    return Receipt.from_run(step, result, output="Package index refreshed")


def upgrade_system(platform: PlatformDescriptor) -> Receipt:
    """Upgrade every installed package (may ask for a reboot)."""
    result = run_command(_UPGRADE_COMMANDS[platform.package_manager], needs_sudo=True)
    return Receipt.from_run("system-upgrade", result, output="System upgraded")


class IndexRefresher:
    """Refresh the package index at most once per run.

    Passed as ``prepare`` to ``install_package``; the first install
    that is really needed triggers the refresh, later ones reuse
    its outcome (a failed refresh is not retried).
    """

    def __init__(self, platform: PlatformDescriptor) -> None:
        self._platform = platform
        self._receipt: Receipt | None = None

    @property
    def refreshed(self) -> bool:
        return self._receipt is not None

    def __call__(self) -> Receipt:
        if self._receipt is None:
            self._receipt = refresh_package_index(self._platform)
        return self._receipt
