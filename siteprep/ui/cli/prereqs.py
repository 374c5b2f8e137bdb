"""
CLI commands for setup prerequisites.
"""

from __future__ import annotations

import click

from siteprep.core.errors import SiteprepError
from siteprep.ui.cli.common import emit_json, emit_warnings, fail, host_for, load_site


@click.group()
def prereqs() -> None:
    """Setup prerequisites — download the files setup needs."""


@prereqs.command("download")
@click.option("--force", is_flag=True, help="Download even if the target already has files.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def download(ctx: click.Context, force: bool, as_json: bool) -> None:
    """Run the setup downloader and wait for it to exit."""
    from siteprep.core.use_cases.prerequisites import download_prerequisites

    try:
        result = download_prerequisites(load_site(ctx), host_for(ctx), force=force)
    except SiteprepError as e:
        fail(e, as_json)

    if as_json:
        emit_json(result.to_dict())
        return

    if result.skipped:
        click.secho(f"⊘ {result.target_dir} already has files (use --force)", fg="yellow")
    else:
        click.secho(f"✅ Prerequisites downloaded to {result.target_dir}", fg="green", bold=True)
    emit_warnings(result.warnings)
    click.echo()
