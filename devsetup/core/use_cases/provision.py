"""
Provision use case — run the tools or shell pipeline end to end.

load config → detect platform → answer prompts → sudo keep-alive →
execute plan → result

Prompts are answered before the first privileged command, so once
the sudo password is entered the run needs no further input (apart
from ``chsh`` in the shell pipeline).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from devsetup.core.config.loader import ConfigError, load_config
from devsetup.core.context import set_dry_run
from devsetup.core.engine.executor import (
    ExecutionPlan,
    ExecutionReport,
    Step,
    execute_plan,
)
from devsetup.core.models.action import Receipt
from devsetup.core.models.target import PlatformDescriptor
from devsetup.core.services.provision.detection.platform import (
    UnsupportedPlatformError,
    detect_platform,
)
from devsetup.core.services.provision.execution.sudo_keepalive import SudoKeepAlive
from devsetup.core.services.provision.orchestration.dev_tools import build_dev_tools_plan
from devsetup.core.services.provision.orchestration.shell_setup import build_shell_plan
from devsetup.core.services.provision.selection import (
    Prompt,
    choose_container_engine,
    choose_databases,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_UNSUPPORTED_PLATFORM = 2


@dataclass
class ProvisionResult:
    """Result of running a provisioning pipeline."""

    pipeline: str = ""
    platform: PlatformDescriptor | None = None
    report: ExecutionReport | None = None
    dry_run: bool = False
    error: str | None = None
    exit_code: int = EXIT_OK

    def to_dict(self) -> dict:
        result: dict = {"pipeline": self.pipeline, "dry_run": self.dry_run}
        if self.platform:
            result["platform"] = self.platform.model_dump()
        if self.error:
            result["error"] = self.error
        if self.report:
            result["report"] = self.report.to_dict()
        result["exit_code"] = self.exit_code
        return result


def _prepare(pipeline: str, config_path: Path | None) -> tuple:
    """Load config and detect the platform; returns (config, platform, error_result)."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        return None, None, ProvisionResult(pipeline=pipeline, error=str(e), exit_code=EXIT_FAILURE)

    try:
        platform = detect_platform()
    except UnsupportedPlatformError as e:
        return config, None, ProvisionResult(
            pipeline=pipeline, error=str(e), exit_code=EXIT_UNSUPPORTED_PLATFORM,
        )
    logger.info(
        "Detected %s on %s/%s", platform.package_manager, platform.os_name, platform.arch,
    )
    return config, platform, None


def _execute(
    plan: ExecutionPlan,
    platform: PlatformDescriptor,
    *,
    dry_run: bool,
    on_start: Callable[[Step], None] | None,
    on_receipt: Callable[[Step, Receipt], None] | None,
) -> ProvisionResult:
    result = ProvisionResult(pipeline=plan.pipeline, platform=platform, dry_run=dry_run)

    set_dry_run(dry_run)
    try:
        with SudoKeepAlive(enabled=not dry_run) as keepalive:
            if not keepalive.ok:
                result.error = "Could not obtain sudo privileges"
                result.exit_code = EXIT_FAILURE
                return result
            report = execute_plan(plan, on_start=on_start, on_receipt=on_receipt)
    finally:
        set_dry_run(False)

    result.report = report
    result.exit_code = report.exit_code
    if report.aborted and report.fatal_receipt is not None:
        result.error = report.fatal_receipt.error
    return result


def run_dev_tools(
    *,
    prompt: Prompt,
    config_path: Path | None = None,
    databases: str | None = None,
    docker: bool | None = None,
    dry_run: bool = False,
    on_start: Callable[[Step], None] | None = None,
    on_receipt: Callable[[Step, Receipt], None] | None = None,
) -> ProvisionResult:
    """Install the fullstack development toolchain.

    Args:
        prompt: Reads one answer from the operator.
        config_path: Optional explicit path to devsetup.yml.
        databases: Preselected databases (e.g. ``"1 3"``); overrides config.
        docker: Preselected container-engine answer; overrides config.
        dry_run: Probe only; report mutations without running them.
    """
    config, platform, failed = _prepare("tools", config_path)
    if failed is not None:
        return failed

    preselected_dbs = databases if databases is not None else config.databases
    preselected_docker = docker if docker is not None else config.docker
    selected = choose_databases(config.database_catalog(), prompt, preselected=preselected_dbs)
    want_docker = choose_container_engine(prompt, preselected=preselected_docker)
    logger.info(
        "Optional components: %s%s",
        ", ".join(c.key for c in selected) or "no databases",
        ", docker" if want_docker else "",
    )

    plan = build_dev_tools_plan(config, platform, databases=selected, docker=want_docker)
    return _execute(plan, platform, dry_run=dry_run, on_start=on_start, on_receipt=on_receipt)


def run_shell_setup(
    *,
    config_path: Path | None = None,
    upgrade: bool | None = None,
    dry_run: bool = False,
    home: Path | None = None,
    on_start: Callable[[Step], None] | None = None,
    on_receipt: Callable[[Step, Receipt], None] | None = None,
) -> ProvisionResult:
    """Install zsh, the prompt theme and plugins, and write the shell configs."""
    config, platform, failed = _prepare("shell", config_path)
    if failed is not None:
        return failed

    settings = config.shell
    if upgrade is not None:
        settings = settings.model_copy(update={"upgrade": upgrade})

    plan = build_shell_plan(settings, platform, home=home, timeout=config.network_timeout)
    return _execute(plan, platform, dry_run=dry_run, on_start=on_start, on_receipt=on_receipt)
