"""
L5 Orchestration — Fullstack development toolchain pipeline.

Order:
    OS packages → release binaries → mise → runtimes →
    npm packages → pip packages → optional components →
    config directories → verification

Everything up to the language packages is fatal: the first failure
stops the run.  Optional components, config directories and the
verification summary only warn.
"""

from __future__ import annotations

import logging

from devsetup.core.engine.executor import ExecutionPlan, generate_operation_id
from devsetup.core.models.action import Receipt
from devsetup.core.models.profile import ProvisionConfig
from devsetup.core.models.target import ComponentSpec, PlatformDescriptor
from devsetup.core.services.provision.data.catalog import VERIFY_COMMANDS
from devsetup.core.services.provision.detection.tool_version import get_tool_version
from devsetup.core.services.provision.execution.files import ensure_directories
from devsetup.core.services.provision.execution.language_packages import (
    install_npm_package,
    install_pip_package,
)
from devsetup.core.services.provision.execution.optional_components import (
    install_component,
)
from devsetup.core.services.provision.execution.package_install import (
    IndexRefresher,
    install_package,
)
from devsetup.core.services.provision.execution.release_install import (
    install_release_binary,
)
from devsetup.core.services.provision.execution.version_manager import (
    ensure_version_manager,
    install_runtime,
)

logger = logging.getLogger(__name__)


def _config_dirs_step(paths: list[str]) -> Receipt:
    try:
        created = ensure_directories(paths)
    except OSError as exc:
        return Receipt.failure("config-dirs", error=str(exc))
    if not created:
        return Receipt.skip("config-dirs", "Configuration directories already exist")
    return Receipt.success(
        "config-dirs",
        output="Created " + ", ".join(str(p) for p in created),
    )


def _verify_step(label: str, cmd: list[str]) -> Receipt:
    step = f"verify:{label.lower()}"
    version = get_tool_version(cmd)
    if version is None:
        return Receipt.failure(step, error=f"{label}: not found", changed=False)
    return Receipt.success(step, output=f"{label} version: {version}", changed=False)


def build_dev_tools_plan(
    config: ProvisionConfig,
    platform: PlatformDescriptor,
    *,
    databases: list[ComponentSpec] | None = None,
    docker: bool = False,
) -> ExecutionPlan:
    """Assemble the toolchain pipeline for this platform.

    Args:
        config: Declared desired state.
        platform: Detected platform (package manager, os, arch).
        databases: Components the operator selected.
        docker: Whether the container engine was selected.
    """
    plan = ExecutionPlan(operation_id=generate_operation_id(), pipeline="tools")
    timeout = config.network_timeout

    # ── OS packages ──
    refresher = IndexRefresher(platform)
    for target in config.essential_packages:
        plan.add(
            f"package:{target.name}", f"Installing {target.name}",
            lambda t=target: install_package(t, platform, prepare=refresher),
            group="packages",
        )

    # ── Release binaries ──
    for spec in config.release_binaries:
        plan.add(
            f"release:{spec.binary}", f"Installing {spec.binary} from {spec.repo}",
            lambda s=spec: install_release_binary(s, platform, timeout=timeout),
            group="releases",
        )

    # ── Version manager + runtimes ──
    plan.add(
        "version-manager:mise", "Setting up mise",
        ensure_version_manager, group="runtimes",
    )
    for runtime in config.runtimes:
        plan.add(
            f"runtime:{runtime.tool}", f"Setting up {runtime.selector}",
            lambda r=runtime: install_runtime(r), group="runtimes",
        )

    # ── Language packages ──
    for pkg in config.npm_packages:
        plan.add(
            f"npm:{pkg}", f"Installing {pkg} globally",
            lambda p=pkg: install_npm_package(p), group="npm",
        )
    for pkg in config.pip_packages:
        plan.add(
            f"pip:{pkg}", f"Installing {pkg}",
            lambda p=pkg: install_pip_package(p), group="pip",
        )

    # ── Optional components ──
    components = list(databases or [])
    if docker:
        components.append(config.container_engine())
    for component in components:
        plan.add(
            f"component:{component.key}", f"Installing {component.label}",
            lambda c=component: install_component(c, platform, timeout=timeout),
            fatal=False, group="optional",
        )

    # ── Post-install ──
    plan.add(
        "config-dirs", "Creating configuration directories",
        lambda: _config_dirs_step(config.config_dirs),
        fatal=False, group="post",
    )
    for label, cmd in VERIFY_COMMANDS:
        plan.add(
            f"verify:{label.lower()}", f"Checking {label}",
            lambda lb=label, c=cmd: _verify_step(lb, c),
            fatal=False, group="verify",
        )

    logger.debug("Built tools plan with %d steps", plan.total_steps)
    return plan
