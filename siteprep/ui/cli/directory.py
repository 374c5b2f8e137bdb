"""
CLI commands for Active Directory preparation.
"""

from __future__ import annotations

import click

from siteprep.core.errors import SiteprepError
from siteprep.ui.cli.common import emit_json, emit_warnings, fail, host_for, load_site


@click.group()
def ad() -> None:
    """Active Directory — System Management container."""


@ad.command("container")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def container(ctx: click.Context, as_json: bool) -> None:
    """Create the container and grant the site server full control."""
    from siteprep.core.use_cases.directory import provision_directory

    try:
        result = provision_directory(load_site(ctx), host_for(ctx))
    except SiteprepError as e:
        fail(e, as_json)

    if as_json:
        emit_json(result.to_dict())
        return

    provision = result.provision
    dn = provision.container.distinguished_name if provision.container else "?"
    if provision.already_present:
        click.secho(f"⊘ Already present: {dn}", fg="yellow")
    else:
        click.secho(f"✅ {dn}", fg="green", bold=True)
        click.echo(f"   Container: {'created' if provision.created else 'existing'}")
        click.echo(f"   Permission: {'granted to ' + result.identity if provision.permission_added else 'existing'}")
    emit_warnings(result.warnings)
    click.echo()
