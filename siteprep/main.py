"""
siteprep — CLI entrypoint.

Usage:
    python -m siteprep.main --help
    siteprep config check
    siteprep --mock ad container
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from siteprep import __version__
from siteprep.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="siteprep")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to siteprep.yml (default: auto-detect).",
)
@click.option("--mock", is_flag=True, help="Use in-memory host adapters (no changes to this machine).")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    mock: bool,
) -> None:
    """siteprep — prepare a Windows server to host a management site."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["mock"] = mock

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = None

    setup_logging(level=level)


@cli.group()
def config() -> None:
    """Site configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate siteprep.yml configuration."""
    from siteprep.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)
        return

    if result.valid:
        assert result.config is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Site server: {result.config.site.server_name or '-'}")
        click.echo(f"   Required features: {len(result.config.features.required)}")
        click.echo(f"   SQL instance: {result.config.sql.instance_name}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


# ── Register step command groups from siteprep/ui/cli/ ─────────

from siteprep.ui.cli.adk import adk
from siteprep.ui.cli.directory import ad
from siteprep.ui.cli.features import features
from siteprep.ui.cli.prereqs import prereqs
from siteprep.ui.cli.sql import sql
from siteprep.ui.cli.wsus import wsus

cli.add_command(features)
cli.add_command(prereqs)
cli.add_command(adk)
cli.add_command(wsus)
cli.add_command(sql)
cli.add_command(ad)


if __name__ == "__main__":
    cli()
