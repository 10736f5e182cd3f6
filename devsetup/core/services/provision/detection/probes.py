"""
L3 Detection — Existence probes.

Read-only checks for whether a tool or package is already present.
Two strategies:

  * command probe — does an executable of that name resolve on PATH?
  * package probe — does the active package database have a record?

"Not found" and "the query tool itself is missing" are the same
answer: unsatisfied.  A probe never fails the run.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from devsetup.core.models.target import PlatformDescriptor, TargetPackage
from devsetup.core.services.provision.data.catalog import MISE_LOCAL_BIN

logger = logging.getLogger(__name__)

_PROBE_TIMEOUT = 30


def command_exists(name: str) -> bool:
    """Check whether ``name`` resolves to an executable on PATH."""
    return shutil.which(name) is not None


def _probe(cmd: list[str], *, timeout: int = _PROBE_TIMEOUT) -> subprocess.CompletedProcess | None:
    """Run a read-only query; ``None`` when the query could not run."""
    try:
        return subprocess.run(
            cmd,
            capture_output=True, text=True, timeout=timeout,
        )
    except FileNotFoundError:
        logger.debug("Probe tool not found: %s", cmd[0])
    except subprocess.TimeoutExpired:
        logger.warning("Timeout probing with: %s", " ".join(cmd))
    except OSError as exc:
        logger.warning("OS error probing with %s: %s", " ".join(cmd), exc)
    return None


def is_package_installed(pkg: str, pkg_manager: str) -> bool:
    """Check if a single system package is installed.

    Uses the appropriate checker for the given package manager:
      apt    → dpkg-query -W -f='${Status}' PKG
      dnf    → rpm -q --whatprovides PKG
      pacman → pacman -Q PKG

    ``--whatprovides`` lets rpm match capability names such as
    ``pkg-config`` that differ from the real package name.

    Args:
        pkg: Exact package name (must match the distro's naming).
        pkg_manager: One of: apt, dnf, pacman.

    Returns:
        True if installed, False if not installed or check failed.
    """
    if pkg_manager == "apt":
        r = _probe(["dpkg-query", "-W", "-f=${Status}", pkg])
        return r is not None and "install ok installed" in r.stdout

    if pkg_manager == "dnf":
        r = _probe(["rpm", "-q", "--whatprovides", pkg])
        return r is not None and r.returncode == 0

    if pkg_manager == "pacman":
        r = _probe(["pacman", "-Q", pkg])
        return r is not None and r.returncode == 0

    logger.warning("No package probe for pm=%s (checking %s)", pkg_manager, pkg)
    return False


def is_target_satisfied(target: TargetPackage, platform: PlatformDescriptor) -> bool:
    """Derive a target's satisfied state right now.

    Targets that declare a ``command`` are probed on PATH; everything
    else must have every translated package installed.  A target
    with no translation for this platform is never satisfied.
    """
    if target.command:
        return command_exists(target.command)

    names = target.names_for(platform.package_manager)
    if not names:
        return False
    return all(is_package_installed(n, platform.package_manager) for n in names)


# ── Ecosystem probes ────────────────────────────────────────────


def is_npm_package_installed(pkg: str, npm: list[str] | None = None) -> bool:
    """``npm list -g PKG`` exits 0 when the global package is present."""
    r = _probe((npm or ["npm"]) + ["list", "-g", pkg])
    return r is not None and r.returncode == 0


def is_pip_package_installed(pkg: str, pip: list[str] | None = None) -> bool:
    """``pip show PKG`` exits 0 when the distribution is installed."""
    r = _probe((pip or ["pip"]) + ["show", pkg])
    return r is not None and r.returncode == 0


def find_mise(local_bin: str = MISE_LOCAL_BIN) -> str | None:
    """Locate the mise executable on PATH or at its default install path."""
    found = shutil.which("mise")
    if found:
        return found
    candidate = Path(local_bin).expanduser()
    if candidate.is_file() and os.access(candidate, os.X_OK):
        return str(candidate)
    return None


def mise_resolves(mise: str, command: str) -> bool:
    """``mise which CMD`` succeeds when mise already provides the runtime."""
    r = _probe([mise, "which", command])
    return r is not None and r.returncode == 0
