"""
L3 Detection — read-only host probes.

These functions READ host state but never WRITE.
"""

from __future__ import annotations

import logging

from siteprep.adapters.base import FeatureInventory, FileSystem
from siteprep.core.context import RunContext
from siteprep.core.errors import ConfigurationMissing
from siteprep.core.models.feature import FeatureState
from siteprep.core.models.version import Version

logger = logging.getLogger(__name__)


def fetch_catalog(
    inventory: FeatureInventory,
    ctx: RunContext,
    *,
    tolerate_missing: bool,
) -> dict[str, FeatureState]:
    """Take the one catalog snapshot for this run.

    Args:
        inventory: Host feature inventory.
        ctx: Run context; a tolerated missing catalog is recorded on it.
        tolerate_missing: When True an unreadable catalog is treated as
            "nothing installed". When False it is fatal.

    Raises:
        ConfigurationMissing: Catalog unreadable and not tolerated.
    """
    try:
        catalog = inventory.catalog()
    except ConfigurationMissing as exc:
        if not tolerate_missing:
            raise
        ctx.set_flag("catalog_missing", True)
        ctx.warn(f"Feature catalog unavailable, assuming nothing is installed: {exc.message}")
        return {}
    ctx.set_flag("catalog_missing", False)
    logger.debug("Catalog snapshot: %d features", len(catalog))
    return catalog


def read_version(files: FileSystem, path: str) -> Version:
    """Version stamped in a binary's metadata.

    Raises:
        ConfigurationMissing: No such file, or it carries no version.
    """
    version = files.file_version(path)
    logger.info("%s reports version %s", path, version)
    return version
