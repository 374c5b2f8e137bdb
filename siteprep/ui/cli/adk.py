"""
CLI commands for the deployment kit.
"""

from __future__ import annotations

import click

from siteprep.core.errors import SiteprepError
from siteprep.ui.cli.common import emit_json, emit_warnings, fail, host_for, load_site


@click.group()
def adk() -> None:
    """Deployment kit — ADK and its WinPE add-on."""


@adk.command("install")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def adk_install(ctx: click.Context, as_json: bool) -> None:
    """Install the kit, and the WinPE add-on when its version needs it."""
    from siteprep.core.use_cases.adk import install_adk

    try:
        result = install_adk(load_site(ctx), host_for(ctx))
    except SiteprepError as e:
        fail(e, as_json)

    if as_json:
        emit_json(result.to_dict())
        return

    click.secho(f"📦 ADK {result.version} (add-on threshold {result.threshold})", fg="cyan", bold=True)
    click.echo(f"   Kit:    {'installed' if result.kit_installed else 'already present'}")
    if result.addon_required:
        click.echo(f"   Add-on: {'installed' if result.addon_installed else 'already present'}")
    else:
        click.echo("   Add-on: not required")
    emit_warnings(result.warnings)
    click.echo()
