"""
L5 Orchestration — zsh + Oh My Posh shell pipeline.

Order:
    prerequisites → zsh → version → login shell → oh-my-posh →
    theme → plugins → .inputrc → .zshrc → (system upgrade)

Every step is fatal except the version report and the optional
system upgrade at the end.
"""

from __future__ import annotations

import logging
from pathlib import Path

from devsetup.core.engine.executor import ExecutionPlan, generate_operation_id
from devsetup.core.models.profile import ShellSettings
from devsetup.core.models.target import PlatformDescriptor, TargetPackage
from devsetup.core.services.provision.data.catalog import ZSH_PACKAGE, ZSH_PLUGIN_DIR
from devsetup.core.services.provision.data.shell_templates import (
    BINARY_ALIASES,
    INPUTRC_TEMPLATE,
    ZSHRC_TEMPLATE,
)
from devsetup.core.services.provision.execution.package_install import (
    IndexRefresher,
    install_package,
    upgrade_system,
)
from devsetup.core.services.provision.execution.shell_config import (
    install_oh_my_posh,
    install_posh_theme,
    install_zsh_plugin,
    render_template,
    set_login_shell,
    shell_version,
    theme_path,
    write_config_file,
)

logger = logging.getLogger(__name__)


def template_values(settings: ShellSettings, platform: PlatformDescriptor) -> dict[str, str]:
    """Values substituted into the shell config templates."""
    aliases = BINARY_ALIASES.get(platform.package_manager, {})
    return {
        "theme_path": str(theme_path(settings.theme)),
        "plugin_dir": str(Path(ZSH_PLUGIN_DIR).expanduser()),
        "bat": aliases.get("bat", "bat"),
        "fd": aliases.get("fd", "fd"),
    }


def build_shell_plan(
    settings: ShellSettings,
    platform: PlatformDescriptor,
    *,
    home: Path | None = None,
    timeout: int = 60,
) -> ExecutionPlan:
    """Assemble the shell pipeline for this platform."""
    plan = ExecutionPlan(operation_id=generate_operation_id(), pipeline="shell")
    home = home or Path.home()
    refresher = IndexRefresher(platform)

    # ── Packages ──
    for target in settings.prerequisites:
        plan.add(
            f"package:{target.name}", f"Installing {target.name}",
            lambda t=target: install_package(t, platform, prepare=refresher),
            group="packages",
        )
    zsh = TargetPackage(**ZSH_PACKAGE)
    plan.add(
        "package:zsh", "Installing zsh",
        lambda: install_package(zsh, platform, prepare=refresher),
        group="packages",
    )
    plan.add("version:zsh", "Checking zsh version", shell_version, fatal=False, group="shell")
    plan.add("login-shell", "Setting zsh as default shell", set_login_shell, group="shell")

    # ── Prompt theme ──
    plan.add("oh-my-posh", "Installing Oh My Posh", install_oh_my_posh, group="prompt")
    plan.add(
        f"theme:{settings.theme}", f"Installing {settings.theme} theme",
        lambda: install_posh_theme(settings.theme, timeout=timeout),
        group="prompt",
    )

    # ── Plugins ──
    for name, url in settings.plugins.items():
        plan.add(
            f"plugin:{name}", f"Installing {name}",
            lambda n=name, u=url: install_zsh_plugin(n, u),
            group="plugins",
        )

    # ── Config files ──
    values = template_values(settings, platform)
    inputrc = render_template(INPUTRC_TEMPLATE, values)
    zshrc = render_template(ZSHRC_TEMPLATE, values)
    plan.add(
        "config:.inputrc", "Writing .inputrc",
        lambda: write_config_file(home / ".inputrc", inputrc),
        group="config",
    )
    plan.add(
        "config:.zshrc", "Writing .zshrc",
        lambda: write_config_file(home / ".zshrc", zshrc),
        group="config",
    )

    if settings.upgrade:
        plan.add(
            "system-upgrade", "Upgrading system packages",
            lambda: upgrade_system(platform), fatal=False, group="upgrade",
        )

    logger.debug("Built shell plan with %d steps", plan.total_steps)
    return plan
