"""
Windows feature inventory — Get-WindowsFeature / Install-WindowsFeature.

A catalog that cannot be read (ServerManager module missing, client
SKU, access denied) is ``ConfigurationMissing``. A catalog that reads
fine but is empty is just an empty dict.
"""

from __future__ import annotations

import logging
from typing import Sequence

from siteprep.adapters.base import CommandRunner
from siteprep.adapters.shell.command import ps_quote, run_powershell
from siteprep.core.errors import CommandFailed, ConfigurationMissing
from siteprep.core.models.feature import FeatureInstallResult, FeatureState

logger = logging.getLogger(__name__)

_CATALOG_SCRIPT = (
    "Import-Module ServerManager; "
    "Get-WindowsFeature | Select-Object Name, Installed | ConvertTo-Json -Compress"
)


class WindowsFeatureInventory:
    """Server Manager backed feature catalog."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def catalog(self) -> dict[str, FeatureState]:
        result = run_powershell(self._runner, _CATALOG_SCRIPT)
        if not result.ok:
            raise ConfigurationMissing(
                "Windows feature catalog could not be read",
                target="Get-WindowsFeature",
                observed=result.error_text[:500],
            )
        try:
            records = result.records()
        except CommandFailed as exc:
            raise ConfigurationMissing(
                "Windows feature catalog returned unreadable output",
                target="Get-WindowsFeature",
                observed=exc.observed,
            ) from exc

        catalog: dict[str, FeatureState] = {}
        for record in records:
            name = record.get("Name")
            if not name:
                continue
            catalog[str(name)] = FeatureState.from_installed(bool(record.get("Installed")))
        logger.debug("Feature catalog: %d entries", len(catalog))
        return catalog

    def install(
        self,
        names: Sequence[str],
        *,
        source: str | None = None,
    ) -> FeatureInstallResult:
        if not names:
            return FeatureInstallResult()

        script = "Install-WindowsFeature -Name " + ",".join(ps_quote(n) for n in names)
        if source:
            script += f" -Source {ps_quote(source)}"
        script += (
            " | Select-Object Success,"
            " @{n='RestartNeeded';e={$_.RestartNeeded.ToString()}},"
            " @{n='ExitCode';e={$_.ExitCode.ToString()}}"
            " | ConvertTo-Json -Compress"
        )

        logger.info("Installing features: %s", ", ".join(names))
        result = run_powershell(self._runner, script)
        if not result.ok:
            raise CommandFailed(
                "Install-WindowsFeature failed",
                target=", ".join(names),
                observed=result.error_text[:500],
            )

        records = result.records()
        record = records[0] if records else {}
        return FeatureInstallResult(
            requested=list(names),
            success=bool(record.get("Success", True)),
            restart_needed=str(record.get("RestartNeeded", "No")).lower() == "yes",
            exit_code=str(record.get("ExitCode", "")),
        )
