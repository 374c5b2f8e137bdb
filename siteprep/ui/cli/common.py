"""
Shared plumbing for the step commands: config, host adapters, errors.
"""

from __future__ import annotations

import json
import sys
from typing import NoReturn, Sequence

import click

from siteprep.adapters.registry import HostRegistry
from siteprep.core.config.loader import load_config
from siteprep.core.errors import SiteprepError
from siteprep.core.models.site import SiteConfig


def load_site(ctx: click.Context) -> SiteConfig:
    """Load siteprep.yml from ``--config`` or by searching upward."""
    return load_config(ctx.obj.get("config_path"))


def host_for(ctx: click.Context) -> HostRegistry:
    """Real host adapters, or in-memory fakes under ``--mock``."""
    host = ctx.obj.get("host")
    if host is None:
        host = HostRegistry(mock_mode=ctx.obj.get("mock", False))
        ctx.obj["host"] = host
    return host


def fail(error: SiteprepError, as_json: bool) -> NoReturn:
    """Report a terminal error and exit 1."""
    if as_json:
        click.echo(json.dumps({"ok": False, "error": error.to_dict()}, indent=2))
    else:
        click.secho(f"❌ {error.message}", fg="red", err=True)
        if error.target:
            click.echo(f"   Target:   {error.target}", err=True)
        if error.expected:
            click.echo(f"   Expected: {error.expected}", err=True)
        if error.observed:
            click.echo(f"   Observed: {error.observed}", err=True)
    sys.exit(1)


def emit_json(payload: dict) -> None:
    click.echo(json.dumps({"ok": True, **payload}, indent=2))


def emit_warnings(warnings: Sequence[str]) -> None:
    if not warnings:
        return
    click.echo()
    click.secho("⚠️  Warnings:", fg="yellow")
    for warning in warnings:
        click.echo(f"   • {warning}")
