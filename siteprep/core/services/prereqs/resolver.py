"""
L1 Domain — Prerequisite resolution (pure).

Compares a feature catalog snapshot against a required set, and
decides whether a version-gated add-on is mandatory.
No I/O, no subprocess.
"""

from __future__ import annotations

from typing import Iterable

from siteprep.core.models.feature import FeatureCatalog, FeatureState
from siteprep.core.models.version import Version


def resolve_missing(required: Iterable[str], catalog: FeatureCatalog) -> list[str]:
    """Features of ``required`` not marked installed in ``catalog``.

    Declaration order is preserved so install commands are identical
    from run to run. Identifiers absent from the catalog count as not
    installed.

    A name listed more than once in ``required`` appears once in the
    result, at its first position, so an install command never names a
    feature twice.

    Example::

        >>> resolve_missing(["A", "B", "C"], {"A": FeatureState.INSTALLED, "B": FeatureState.ABSENT})
        ['B', 'C']
    """
    missing: list[str] = []
    for name in required:
        if catalog.get(name) == FeatureState.INSTALLED:
            continue
        if name not in missing:
            missing.append(name)
    return missing


def addon_required(installed: Version, threshold: Version) -> bool:
    """Whether a tool at ``installed`` needs its separately shipped add-on.

    The threshold is inclusive: a tool exactly at the threshold
    version requires the add-on.
    """
    return installed >= threshold
