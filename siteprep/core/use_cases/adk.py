"""
Deployment kit use case — ADK plus its version-gated WinPE add-on.

From ADK 1809 (10.1.17763.1) on, WinPE ships as a separate installer.
The installer's own file version decides whether the add-on is needed;
that check always runs, even when the kit is already installed, so
the operator is told about the add-on either way.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import PureWindowsPath
from typing import Callable

from siteprep.adapters.registry import HostRegistry
from siteprep.core.context import RunContext
from siteprep.core.errors import ConfigurationMissing, VersionIncompatible
from siteprep.core.models.site import SiteConfig
from siteprep.core.services.prereqs import addon_required, launch_and_wait, read_version

logger = logging.getLogger(__name__)

_QUIET_ARGS = ["/quiet", "/norestart", "/ceip", "off"]


@dataclass
class AdkResult:
    version: str = ""
    threshold: str = ""
    addon_required: bool = False
    kit_installed: bool = False
    addon_installed: bool = False
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "threshold": self.threshold,
            "addon_required": self.addon_required,
            "kit_installed": self.kit_installed,
            "addon_installed": self.addon_installed,
            "warnings": self.warnings,
        }


def install_adk(
    config: SiteConfig,
    host: HostRegistry,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> AdkResult:
    """Install the deployment kit and, when its version needs it, the add-on.

    Raises:
        ConfigurationMissing: Kit installer not configured or not on disk.
        VersionIncompatible: The add-on is required, WinPE is not
            already present, and the add-on installer is not available.
    """
    options = config.adk
    if not options.installer:
        raise ConfigurationMissing("adk.installer is not configured", target="adk.installer")

    result = AdkResult(threshold=str(options.threshold))
    with RunContext("adk-install") as ctx:
        version = read_version(host.files, options.installer)
        result.version = str(version)
        result.addon_required = addon_required(version, options.threshold)
        ctx.set_flag("addon_required", result.addon_required)

        winpe_present = False
        if result.addon_required:
            ctx.warn(
                f"ADK {version} is at or above {options.threshold}: "
                "the WinPE add-on must be installed separately"
            )
            winpe_present = host.files.exists(options.winpe_dir)
            if not winpe_present and not options.addon_installer:
                raise VersionIncompatible(
                    "ADK version requires the WinPE add-on but adk.addon_installer is not configured",
                    target="adk.addon_installer",
                    expected=f"add-on installer for ADK >= {options.threshold}",
                    observed=f"ADK {version}, no add-on configured",
                )
            if not winpe_present and not host.files.exists(options.addon_installer):
                raise VersionIncompatible(
                    "ADK version requires the WinPE add-on but its installer is missing",
                    target=options.addon_installer,
                    expected=f"add-on installer for ADK >= {options.threshold}",
                    observed="file not found",
                )

        # Before the split WinPE is a feature of the kit itself.
        kit_features = list(options.features)
        if not result.addon_required:
            kit_features += [f for f in options.addon_features if f not in kit_features]

        if host.files.exists(options.deployment_tools_dir):
            logger.info("Deployment tools already present at %s", options.deployment_tools_dir)
        else:
            launch_and_wait(
                host.launcher,
                host.processes,
                options.installer,
                [*_QUIET_ARGS, "/features", *kit_features],
                image_name=PureWindowsPath(options.installer).name,
                interval=config.poll_interval,
                sleep=sleep,
            )
            result.kit_installed = True

        if result.addon_required:
            if winpe_present:
                logger.info("WinPE add-on already present at %s", options.winpe_dir)
            else:
                launch_and_wait(
                    host.launcher,
                    host.processes,
                    options.addon_installer,
                    [*_QUIET_ARGS, "/features", *options.addon_features],
                    image_name=PureWindowsPath(options.addon_installer).name,
                    interval=config.poll_interval,
                    sleep=sleep,
                )
                result.addon_installed = True

    result.warnings = list(ctx.warnings)
    return result
