"""
Check use case — read-only report of what is already installed.

Runs every existence probe the pipelines would run and nothing else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from devsetup.core.config.loader import ConfigError, load_config
from devsetup.core.models.profile import ProvisionConfig
from devsetup.core.models.target import PlatformDescriptor, TargetPackage
from devsetup.core.services.provision.data.catalog import ZSH_PACKAGE
from devsetup.core.services.provision.detection.platform import (
    UnsupportedPlatformError,
    detect_platform,
)
from devsetup.core.services.provision.detection.probes import (
    command_exists,
    find_mise,
    is_npm_package_installed,
    is_pip_package_installed,
    is_target_satisfied,
    mise_resolves,
)
from devsetup.core.services.provision.execution.language_packages import tool_command

logger = logging.getLogger(__name__)


@dataclass
class CheckItem:
    group: str
    name: str
    installed: bool


@dataclass
class CheckResult:
    """Result of probing every declared target."""

    platform: PlatformDescriptor | None = None
    items: list[CheckItem] = field(default_factory=list)
    error: str | None = None
    exit_code: int = 0

    @property
    def missing(self) -> list[CheckItem]:
        return [i for i in self.items if not i.installed]

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error, "exit_code": self.exit_code}
        return {
            "platform": self.platform.model_dump() if self.platform else None,
            "installed": len(self.items) - len(self.missing),
            "missing": len(self.missing),
            "items": [
                {"group": i.group, "name": i.name, "installed": i.installed}
                for i in self.items
            ],
        }


def probe_targets(config: ProvisionConfig, platform: PlatformDescriptor) -> list[CheckItem]:
    """Probe every target both pipelines declare."""
    items: list[CheckItem] = []

    for target in config.essential_packages:
        items.append(CheckItem("packages", target.name, is_target_satisfied(target, platform)))
    for spec in config.release_binaries:
        items.append(CheckItem("releases", spec.binary, command_exists(spec.binary)))

    mise = find_mise()
    items.append(CheckItem("runtimes", "mise", mise is not None))
    for runtime in config.runtimes:
        if mise is not None:
            present = mise_resolves(mise, runtime.probe_command)
        else:
            present = command_exists(runtime.probe_command)
        items.append(CheckItem("runtimes", runtime.selector, present))

    if config.npm_packages:
        npm = tool_command("npm")
        for pkg in config.npm_packages:
            items.append(CheckItem("npm", pkg, is_npm_package_installed(pkg, npm)))
    if config.pip_packages:
        pip = tool_command("pip")
        for pkg in config.pip_packages:
            items.append(CheckItem("pip", pkg, is_pip_package_installed(pkg, pip)))

    for target in config.shell.prerequisites + [TargetPackage(**ZSH_PACKAGE)]:
        items.append(CheckItem("shell", target.name, is_target_satisfied(target, platform)))

    return items


def check_system(config_path: Path | None = None) -> CheckResult:
    """Detect the platform and probe every declared target."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        return CheckResult(error=str(e), exit_code=1)

    try:
        platform = detect_platform()
    except UnsupportedPlatformError as e:
        return CheckResult(error=str(e), exit_code=2)

    items = probe_targets(config, platform)
    logger.info("Probed %d targets on %s", len(items), platform.package_manager)
    return CheckResult(platform=platform, items=items)
