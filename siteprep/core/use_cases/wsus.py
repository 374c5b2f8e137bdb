"""
WSUS use case — install the update-services role, then run its
post-install step.

The role's binaries alone are not operational: ``WsusUtil.exe
postinstall`` must run afterwards to create the database and bind the
content directory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from siteprep.adapters.registry import HostRegistry
from siteprep.core.context import RunContext
from siteprep.core.errors import CommandFailed, ConfigurationMissing
from siteprep.core.models.site import SiteConfig
from siteprep.core.use_cases.features import FeatureReport, ensure_features

logger = logging.getLogger(__name__)


@dataclass
class WsusResult:
    features: FeatureReport = field(default_factory=FeatureReport)
    postinstall_command: list[str] = field(default_factory=list)
    postinstall_output: str = ""
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "features": self.features.to_dict(),
            "postinstall_command": self.postinstall_command,
            "postinstall_output": self.postinstall_output,
            "warnings": self.warnings,
        }


def postinstall_command(config: SiteConfig) -> list[str]:
    options = config.wsus
    command = [options.wsusutil, "postinstall", f"CONTENT_DIR={options.content_dir}"]
    if options.sql_instance:
        command.append(f"SQL_INSTANCE_NAME={options.sql_instance}")
    return command


def install_wsus(config: SiteConfig, host: HostRegistry) -> WsusResult:
    """Install the WSUS role features and run the post-install step.

    Raises:
        ConfigurationMissing: Catalog unreadable (and not tolerated) or
            WsusUtil.exe absent after the role install.
        CommandFailed: Feature install or post-install step failed.
    """
    result = WsusResult()
    with RunContext("wsus-install") as ctx:
        result.features = ensure_features(
            host,
            config.wsus.features,
            ctx,
            source=config.features.source,
            tolerate_missing_catalog=config.features.tolerate_missing_catalog,
        )

        wsusutil = config.wsus.wsusutil
        if not host.files.exists(wsusutil):
            raise ConfigurationMissing(
                "WsusUtil.exe not found; is the UpdateServices role installed?",
                target=wsusutil,
            )

        host.files.ensure_dir(config.wsus.content_dir)
        command = postinstall_command(config)
        result.postinstall_command = command

        logger.info("Running WSUS post-install (content: %s)", config.wsus.content_dir)
        completed = host.runner.run(command)
        result.postinstall_output = (completed.stdout or "").strip()[-2000:]
        if completed.returncode != 0:
            raise CommandFailed(
                "WSUS post-install step failed",
                target=" ".join(command),
                expected="exit 0",
                observed=f"exit {completed.returncode}: {(completed.stderr or completed.stdout or '').strip()[:300]}",
            )

    result.warnings = list(ctx.warnings)
    return result
