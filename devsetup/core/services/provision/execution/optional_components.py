"""
L4 Execution — Optional components (databases, container engine).

Each component is probed by command; when absent it is installed,
then its service is enabled and started.  Components flagged
``apt_only`` need a vendor apt repository and are skipped with a
warning on other package managers.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Callable

from devsetup.core.models.action import Receipt
from devsetup.core.models.target import ComponentSpec, PlatformDescriptor
from devsetup.core.services.provision.data.catalog import (
    APT_REPOSITORIES,
    DOCKER_DAEMON_CONFIG,
    DOCKER_DAEMON_FILE,
)
from devsetup.core.services.provision.detection.probes import command_exists
from devsetup.core.services.provision.execution.download import download_file
from devsetup.core.services.provision.execution.files import write_root_file
from devsetup.core.services.provision.execution.package_install import (
    install_command,
    refresh_package_index,
)
from devsetup.core.services.provision.execution.services import enable_and_start
from devsetup.core.services.provision.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)


def _query(cmd: list[str], fallback: str) -> str:
    """Read a single token from a read-only command."""
    try:
        r = subprocess.run(cmd, capture_output=True, text=True, timeout=10)
    except (OSError, subprocess.TimeoutExpired):
        return fallback
    value = r.stdout.strip()
    return value if r.returncode == 0 and value else fallback


def add_apt_repository(key: str, *, timeout: int = 60) -> dict[str, Any]:
    """Install a vendor signing key and apt source list, then refresh.

    The key is dearmored into a dedicated keyring referenced by the
    source line (``signed-by``) instead of the global apt trust store.
    """
    repo = APT_REPOSITORIES[key]
    keyring = repo["keyring"]

    with tempfile.TemporaryDirectory(prefix=f"devsetup-{key}-") as tmp:
        armored = Path(tmp) / "key.asc"
        fetched = download_file(repo["key_url"], armored, timeout=timeout)
        if not fetched["ok"]:
            return fetched
        result = run_command(
            ["gpg", "--dearmor", "--yes", "-o", keyring, str(armored)],
            needs_sudo=True,
            timeout=60,
        )
        if not result["ok"]:
            return result

    source = repo["source"].format(
        keyring=keyring,
        dpkg_arch=_query(["dpkg", "--print-architecture"], "amd64"),
        codename=_query(["lsb_release", "-cs"], "jammy"),
    )
    result = write_root_file(repo["list_file"], source + "\n")
    if not result["ok"]:
        return result

    return run_command(["apt-get", "update"], needs_sudo=True)


def _configure_docker() -> dict[str, Any]:
    """Write the daemon log config and add the operator to ``docker``."""
    result = write_root_file(
        DOCKER_DAEMON_FILE,
        json.dumps(DOCKER_DAEMON_CONFIG, separators=(",", ":")) + "\n",
    )
    if not result["ok"]:
        return result

    user = os.environ.get("USER") or os.environ.get("LOGNAME", "")
    if not user or user == "root":
        return result
    return run_command(["usermod", "-aG", "docker", user], needs_sudo=True, timeout=60)


# Extra configuration applied between install and service start.
_POST_INSTALL: dict[str, Callable[[], dict[str, Any]]] = {
    "docker": _configure_docker,
}


def install_component(
    spec: ComponentSpec,
    platform: PlatformDescriptor,
    *,
    timeout: int = 60,
) -> Receipt:
    """Install an optional component and start its service."""
    step = f"component:{spec.key}"
    pm = platform.package_manager

    if command_exists(spec.probe):
        logger.info("✓ %s is already installed", spec.label)
        return Receipt.skip(step, f"{spec.label} is already installed")

    if spec.apt_only and pm != "apt":
        logger.warning(
            "%s installation is currently only supported for apt-based systems", spec.label,
        )
        return Receipt.skip(
            step,
            f"{spec.label} installation is only supported on apt-based systems",
            metadata={"unsupported": True},
        )

    names = spec.package.names_for(pm)
    if not names:
        return Receipt.skip(step, f"{spec.label} is not available via {pm}")

    if spec.key in APT_REPOSITORIES:
        added = add_apt_repository(spec.key, timeout=timeout)
        if not added["ok"]:
            return Receipt.from_run(step, added)
    else:
        refreshed = refresh_package_index(platform)
        if refreshed.failed:
            return refreshed.model_copy(update={"step": step})

    installed = run_command(install_command(pm, names), needs_sudo=True)
    if not installed["ok"]:
        return Receipt.from_run(step, installed)

    post = _POST_INSTALL.get(spec.key)
    if post is not None:
        configured = post()
        if not configured["ok"]:
            return Receipt.from_run(step, configured)

    service = spec.service_for(pm)
    started = enable_and_start(service)
    if not started["ok"]:
        receipt = Receipt.from_run(step, started)
        receipt.error = f"{spec.label} installed but service {service} did not start: {receipt.error}"
        receipt.changed = True
        return receipt

    return Receipt.success(
        step,
        output=f"Installed {spec.label} and started {service}",
        metadata={"service": service},
    )
