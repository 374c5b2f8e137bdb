"""
CLI commands for the SQL Server instance.
"""

from __future__ import annotations

import click

from siteprep.core.errors import SiteprepError
from siteprep.ui.cli.common import emit_json, emit_warnings, fail, host_for, load_site


@click.group()
def sql() -> None:
    """SQL Server — unattended instance setup."""


@sql.command("install")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def sql_install(ctx: click.Context, as_json: bool) -> None:
    """Install the configured instance unless it already exists."""
    from siteprep.core.use_cases.sql import install_sql

    try:
        result = install_sql(load_site(ctx), host_for(ctx))
    except SiteprepError as e:
        fail(e, as_json)

    if as_json:
        emit_json(result.to_dict())
        return

    if result.already_installed:
        click.secho(f"⊘ Instance {result.instance_name} already installed", fg="yellow")
    else:
        click.secho(f"✅ Instance {result.instance_name} installed", fg="green", bold=True)
        click.echo(f"   Service: {result.service_name}")
        click.echo(f"   TCP port: {result.tcp_port}")
    emit_warnings(result.warnings)
    click.echo()
