"""
L4 Execution — zsh, prompt theme, plugins and config files.

Configuration files are immutable templates rendered once and
written through ``backup.replace_with_backup``.  A file whose
current content already matches the rendering is left alone (no
new backup), which keeps a second run free of changes.
"""

from __future__ import annotations

import logging
import os
import pwd
import shutil
import subprocess
from pathlib import Path

from devsetup.core.context import is_dry_run
from devsetup.core.models.action import Receipt
from devsetup.core.services.provision.data.catalog import (
    OH_MY_POSH_INSTALL_URL,
    POSH_THEME_DIR,
    POSH_THEME_URL,
    ZSH_PLUGIN_DIR,
)
from devsetup.core.services.provision.detection.probes import command_exists
from devsetup.core.services.provision.execution.backup import replace_with_backup
from devsetup.core.services.provision.execution.download import download_file
from devsetup.core.services.provision.execution.subprocess_runner import (
    run_command,
    run_pipeline,
)

logger = logging.getLogger(__name__)


def render_template(template: str, values: dict[str, str]) -> str:
    """Substitute ``{key}`` placeholders for the given keys only.

    Plain string replacement instead of ``str.format``, so any other
    brace in the template survives unchanged.
    """
    result = template
    for key, value in values.items():
        result = result.replace(f"{{{key}}}", str(value))
    return result


def theme_path(theme: str) -> Path:
    return Path(POSH_THEME_DIR).expanduser() / f"{theme}.omp.json"


def write_config_file(path: Path, content: str) -> Receipt:
    """Back up and replace ``path`` unless it already has ``content``."""
    step = f"config:{path.name}"

    if path.is_file():
        try:
            if path.read_text(encoding="utf-8") == content:
                return Receipt.skip(step, f"{path} is up to date")
        except (OSError, UnicodeDecodeError):
            pass  # unreadable or binary: back it up and overwrite

    try:
        backup = replace_with_backup(path, content)
    except OSError as exc:
        return Receipt.failure(step, error=f"Cannot write {path}: {exc}")

    meta = {"path": str(path)}
    if backup is not None:
        meta["backup"] = str(backup)
    if is_dry_run():
        meta["dry_run"] = True
    return Receipt.success(step, output=f"Wrote {path}", metadata=meta)


def login_shell() -> str:
    """The account's login shell from the passwd database.

    ``chsh`` does not update ``$SHELL`` in the running session, so the
    environment is only consulted when the account has no entry or an
    empty shell field.
    """
    try:
        shell = pwd.getpwuid(os.getuid()).pw_shell
    except KeyError:
        shell = ""
    return shell or os.environ.get("SHELL", "")


def set_login_shell(shell_name: str = "zsh") -> Receipt:
    """Make ``shell_name`` the operator's login shell (``chsh -s``)."""
    step = "login-shell"
    shell_path = shutil.which(shell_name)
    if shell_path is None:
        return Receipt.failure(step, error=f"{shell_name} is not on PATH")

    current = login_shell()
    if current and Path(current).name == shell_name:
        return Receipt.skip(step, f"{shell_name} is already the login shell")

    # chsh prompts for the password on the terminal.
    result = run_command(["chsh", "-s", shell_path], interactive=True, timeout=300)
    return Receipt.from_run(step, result, output=f"Login shell set to {shell_path}")


def shell_version(shell_name: str = "zsh") -> Receipt:
    """Report the installed shell version (read-only)."""
    step = f"version:{shell_name}"
    if not command_exists(shell_name):
        return Receipt.skip(step, f"{shell_name} is not installed")
    try:
        r = subprocess.run([shell_name, "--version"], capture_output=True, text=True, timeout=10)
    except (OSError, subprocess.TimeoutExpired) as exc:
        return Receipt.skip(step, f"Cannot read {shell_name} version: {exc}")
    return Receipt.success(step, output=r.stdout.strip(), changed=False)


def install_oh_my_posh() -> Receipt:
    """Run the Oh My Posh vendor install script unless already present."""
    step = "oh-my-posh"
    if command_exists("oh-my-posh") or Path("~/.local/bin/oh-my-posh").expanduser().is_file():
        return Receipt.skip(step, "oh-my-posh is already installed")

    result = run_pipeline(f"curl -fsSL {OH_MY_POSH_INSTALL_URL} | bash -s")
    return Receipt.from_run(step, result, output="Installed oh-my-posh")


def install_posh_theme(theme: str, *, timeout: int = 60) -> Receipt:
    """Download the prompt theme JSON unless it is already there."""
    step = f"theme:{theme}"
    dest = theme_path(theme)
    if dest.is_file():
        return Receipt.skip(step, f"Theme {theme} is already installed")

    result = download_file(POSH_THEME_URL.format(theme=theme), dest, timeout=timeout)
    if not result["ok"]:
        return Receipt.failure(step, error=result["error"])
    return Receipt.success(step, output=f"Downloaded {dest}", metadata={"path": str(dest)})


def install_zsh_plugin(name: str, url: str, *, plugin_dir: str = ZSH_PLUGIN_DIR) -> Receipt:
    """``git clone`` a plugin into the plugin directory unless present."""
    step = f"plugin:{name}"
    dest = Path(plugin_dir).expanduser() / name
    if dest.is_dir():
        return Receipt.skip(step, f"{name} is already installed")

    result = run_command(["git", "clone", "--depth", "1", url, str(dest)], timeout=300)
    return Receipt.from_run(step, result, output=f"Cloned {name}")
