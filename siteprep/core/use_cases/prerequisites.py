"""
Prerequisite download use case — run the product's setup downloader.

``setupdl.exe /NoUI <dir>`` fetches the redistributables and language
packs that site setup needs. It returns immediately and keeps working
in the background, so completion is observed by polling.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from siteprep.adapters.registry import HostRegistry
from siteprep.core.context import RunContext
from siteprep.core.errors import ConfigurationMissing
from siteprep.core.models.site import SiteConfig
from siteprep.core.services.prereqs import launch_and_wait

logger = logging.getLogger(__name__)


@dataclass
class DownloadResult:
    target_dir: str = ""
    skipped: bool = False
    checks: int = 0
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "target_dir": self.target_dir,
            "skipped": self.skipped,
            "checks": self.checks,
            "warnings": self.warnings,
        }


def download_prerequisites(
    config: SiteConfig,
    host: HostRegistry,
    *,
    force: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> DownloadResult:
    """Download setup prerequisites unless the target already has them.

    Raises:
        ConfigurationMissing: Downloader or target not configured, or
            the downloader is not on disk.
    """
    options = config.prerequisites
    if not options.downloader:
        raise ConfigurationMissing("prerequisites.downloader is not configured", target="prerequisites.downloader")
    if not options.target_dir:
        raise ConfigurationMissing("prerequisites.target_dir is not configured", target="prerequisites.target_dir")
    if not host.files.exists(options.downloader):
        raise ConfigurationMissing("Setup downloader not found", target=options.downloader)

    result = DownloadResult(target_dir=options.target_dir)
    with RunContext("prereqs-download") as ctx:
        if host.files.has_entries(options.target_dir) and not force:
            logger.info("%s already holds files, skipping download", options.target_dir)
            result.skipped = True
        else:
            host.files.ensure_dir(options.target_dir)
            result.checks = launch_and_wait(
                host.launcher,
                host.processes,
                options.downloader,
                ["/NoUI", options.target_dir],
                image_name=options.image_name,
                interval=config.poll_interval,
                sleep=sleep,
            )
            if not host.files.has_entries(options.target_dir):
                ctx.warn(f"Downloader finished but {options.target_dir} is empty; check its log")
    result.warnings = list(ctx.warnings)
    return result
