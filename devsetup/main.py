"""
devsetup — CLI entrypoint.

Usage:
    devsetup --help
    devsetup tools
    devsetup shell --dry-run
    devsetup check --json
"""

from __future__ import annotations

from pathlib import Path

import click

from devsetup import __version__
from devsetup.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="devsetup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to devsetup.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """devsetup — provision a Linux development workstation."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))


# ── Register commands from devsetup/ui/cli/ ──────────────────────

from devsetup.ui.cli.check import check  # noqa: E402
from devsetup.ui.cli.provision import shell, tools  # noqa: E402

cli.add_command(tools)
cli.add_command(shell)
cli.add_command(check)


if __name__ == "__main__":
    cli()
