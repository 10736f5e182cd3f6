"""
L3 Detection — Platform descriptor.

Detects which OS package manager drives this machine and the
OS/architecture tokens used to build release download URLs.
"""

from __future__ import annotations

import logging
import os
import platform as _platform
import shutil

from devsetup.core.models.target import PACKAGE_MANAGERS, PlatformDescriptor

logger = logging.getLogger(__name__)

# Only two spellings are normalized.  Anything else passes through
# untouched and may produce a release URL that does not exist.
_ARCH_MAP: dict[str, str] = {
    "x86_64": "x86_64",
    "aarch64": "arm64",
}


class UnsupportedPlatformError(Exception):
    """Raised when none of the supported package managers is present."""


def detect_package_manager() -> str:
    """Return the first supported package manager found on PATH.

    Priority is fixed: apt, then dnf, then pacman.  A machine that
    exposes several (e.g. apt installed on an Arch box) always gets
    the earliest one.

    Raises:
        UnsupportedPlatformError: if none is present.
    """
    for pm in PACKAGE_MANAGERS:
        if shutil.which(pm):
            logger.debug("Detected package manager: %s", pm)
            return pm
    raise UnsupportedPlatformError(
        "Unsupported package manager: none of "
        f"{', '.join(PACKAGE_MANAGERS)} found on PATH"
    )


def normalize_arch(machine: str) -> str:
    """Map ``uname -m`` output to the release-asset architecture token."""
    return _ARCH_MAP.get(machine, machine)


def detect_platform() -> PlatformDescriptor:
    """Build the PlatformDescriptor for this machine.

    Raises:
        UnsupportedPlatformError: if no supported package manager exists.
    """
    pm = detect_package_manager()
    descriptor = PlatformDescriptor(
        package_manager=pm,
        os_name=_platform.system().lower(),
        arch=normalize_arch(_platform.machine()),
        is_root=os.geteuid() == 0,
    )
    logger.info(
        "Platform: pm=%s os=%s arch=%s root=%s",
        descriptor.package_manager, descriptor.os_name,
        descriptor.arch, descriptor.is_root,
    )
    return descriptor
