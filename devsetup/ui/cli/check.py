"""
CLI command for the read-only installation report.
"""

from __future__ import annotations

import json
import sys

import click


@click.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Show the platform and which declared tools are already installed."""
    from devsetup.core.use_cases.check import check_system

    result = check_system(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(result.exit_code)

    platform = result.platform
    assert platform is not None  # guaranteed after error check above

    click.secho(
        f"\n🖥️  {platform.package_manager} on {platform.os_name}/{platform.arch}",
        fg="cyan",
        bold=True,
    )

    group = None
    for item in result.items:
        if item.group != group:
            group = item.group
            click.echo()
            click.secho(f"   {group}:", fg="white", bold=True)
        if item.installed:
            click.secho(f"     ✓ {item.name}", fg="green")
        else:
            click.secho(f"     ✗ {item.name}", fg="red")

    click.echo()
    missing = len(result.missing)
    if missing:
        click.secho(f"   {missing} of {len(result.items)} not installed", fg="yellow", bold=True)
    else:
        click.secho("✅ Everything is installed", fg="green", bold=True)
    click.echo()
