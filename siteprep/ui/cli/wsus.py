"""
CLI commands for the software-update role.
"""

from __future__ import annotations

import click

from siteprep.core.errors import SiteprepError
from siteprep.ui.cli.common import emit_json, emit_warnings, fail, host_for, load_site


@click.group()
def wsus() -> None:
    """Software updates — WSUS role and post-install."""


@wsus.command("install")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def wsus_install(ctx: click.Context, as_json: bool) -> None:
    """Install the WSUS features and run the post-install step."""
    from siteprep.core.use_cases.wsus import install_wsus

    try:
        result = install_wsus(load_site(ctx), host_for(ctx))
    except SiteprepError as e:
        fail(e, as_json)

    if as_json:
        emit_json(result.to_dict())
        return

    installed = result.features.installed
    if installed:
        click.secho(f"✅ Installed {', '.join(installed)}", fg="green")
    click.secho("✅ WSUS post-install completed", fg="green", bold=True)
    if ctx.obj.get("verbose") and result.postinstall_output:
        for line in result.postinstall_output.splitlines()[:10]:
            click.echo(f"     │ {line}")
    emit_warnings(result.warnings)
    click.echo()
