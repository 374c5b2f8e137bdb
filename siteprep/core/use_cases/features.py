"""
Features use case — check and install required Windows features.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from siteprep.adapters.registry import HostRegistry
from siteprep.core.context import RunContext
from siteprep.core.errors import CommandFailed
from siteprep.core.models.feature import FeatureCatalog
from siteprep.core.models.site import SiteConfig
from siteprep.core.services.prereqs import fetch_catalog, resolve_missing

logger = logging.getLogger(__name__)


@dataclass
class FeatureReport:
    """What was missing, and what (if anything) got installed."""

    required: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    missing_recommended: list[str] = field(default_factory=list)
    installed: list[str] = field(default_factory=list)
    restart_needed: bool = False
    catalog_missing: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def satisfied(self) -> bool:
        return not self.missing or self.installed == self.missing

    def to_dict(self) -> dict:
        return {
            "required": self.required,
            "missing": self.missing,
            "missing_recommended": self.missing_recommended,
            "installed": self.installed,
            "restart_needed": self.restart_needed,
            "catalog_missing": self.catalog_missing,
            "satisfied": self.satisfied,
            "warnings": self.warnings,
        }


def _warn_recommended(recommended: Sequence[str], catalog: FeatureCatalog, ctx: RunContext) -> list[str]:
    missing = resolve_missing(recommended, catalog)
    for name in missing:
        ctx.warn(f"Recommended feature not installed: {name}")
    return missing


def ensure_features(
    host: HostRegistry,
    required: Sequence[str],
    ctx: RunContext,
    *,
    source: str | None = None,
    tolerate_missing_catalog: bool = False,
    recommended: Sequence[str] = (),
    apply: bool = True,
) -> FeatureReport:
    """Snapshot the catalog, resolve the delta, install it once.

    Raises:
        ConfigurationMissing: Catalog unreadable and not tolerated.
        CommandFailed: The install command reported failure.
    """
    report = FeatureReport(required=list(required))

    catalog = fetch_catalog(host.features, ctx, tolerate_missing=tolerate_missing_catalog)
    report.catalog_missing = bool(ctx.flag("catalog_missing"))
    report.missing = resolve_missing(required, catalog)
    report.missing_recommended = _warn_recommended(recommended, catalog, ctx)

    if not report.missing:
        logger.info("All %d required features already installed", len(report.required))
        return report
    if not apply:
        return report

    outcome = host.features.install(report.missing, source=source)
    if not outcome.success:
        raise CommandFailed(
            "Feature installation reported failure",
            target=", ".join(report.missing),
            expected="Success",
            observed=outcome.exit_code or "failure",
        )
    report.installed = list(report.missing)
    if outcome.restart_needed:
        report.restart_needed = True
        ctx.set_flag("restart_pending", True)
        ctx.warn("A restart is required to finish installing Windows features")
    return report


def check_features(config: SiteConfig, host: HostRegistry) -> FeatureReport:
    """Report missing features without changing anything."""
    with RunContext("features-check") as ctx:
        report = ensure_features(
            host,
            config.features.required,
            ctx,
            tolerate_missing_catalog=config.features.tolerate_missing_catalog,
            recommended=config.features.recommended,
            apply=False,
        )
    report.warnings = list(ctx.warnings)
    return report


def install_features(config: SiteConfig, host: HostRegistry) -> FeatureReport:
    """Install whatever required features are missing."""
    with RunContext("features-install") as ctx:
        report = ensure_features(
            host,
            config.features.required,
            ctx,
            source=config.features.source,
            tolerate_missing_catalog=config.features.tolerate_missing_catalog,
            recommended=config.features.recommended,
        )
    report.warnings = list(ctx.warnings)
    return report
