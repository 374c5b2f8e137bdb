"""
CLI commands for Windows features.

Thin wrappers over ``siteprep.core.use_cases.features``.
"""

from __future__ import annotations

import click

from siteprep.core.errors import SiteprepError
from siteprep.core.use_cases.features import FeatureReport
from siteprep.ui.cli.common import emit_json, emit_warnings, fail, host_for, load_site


@click.group()
def features() -> None:
    """Windows features — check and install the required role services."""


def _print_report(report: FeatureReport) -> None:
    if report.catalog_missing:
        click.secho("⊘ Feature catalog unavailable; nothing could be checked", fg="yellow")
    elif not report.missing:
        click.secho(f"✅ All {len(report.required)} required features installed", fg="green", bold=True)
    elif report.installed:
        click.secho(f"✅ Installed {len(report.installed)} feature(s)", fg="green", bold=True)
        for name in report.installed:
            click.echo(f"   ✓ {name}")
    else:
        click.secho(f"✗ {len(report.missing)} required feature(s) missing", fg="red", bold=True)
        for name in report.missing:
            click.echo(f"   • {name}")

    if report.restart_needed:
        click.secho("   ↻ Restart required", fg="yellow")
    emit_warnings(report.warnings)
    click.echo()


@features.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def features_check(ctx: click.Context, as_json: bool) -> None:
    """Report required features that are not installed."""
    from siteprep.core.use_cases.features import check_features

    try:
        report = check_features(load_site(ctx), host_for(ctx))
    except SiteprepError as e:
        fail(e, as_json)

    if as_json:
        emit_json(report.to_dict())
        return
    _print_report(report)


@features.command("install")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def features_install(ctx: click.Context, as_json: bool) -> None:
    """Install every missing required feature in one call."""
    from siteprep.core.use_cases.features import install_features

    try:
        report = install_features(load_site(ctx), host_for(ctx))
    except SiteprepError as e:
        fail(e, as_json)

    if as_json:
        emit_json(report.to_dict())
        return
    _print_report(report)
