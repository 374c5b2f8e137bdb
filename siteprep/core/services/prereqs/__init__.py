"""
Prerequisite resolution — package re-exports.

Layers:
    resolver   — pure: catalog delta and add-on predicate (no I/O)
    detection  — read-only host probes (catalog, binary versions)
    execution  — launching installers and waiting for them
"""

from siteprep.core.services.prereqs.detection import fetch_catalog, read_version  # noqa: F401
from siteprep.core.services.prereqs.execution import launch_and_wait, wait_while  # noqa: F401
from siteprep.core.services.prereqs.resolver import addon_required, resolve_missing  # noqa: F401
