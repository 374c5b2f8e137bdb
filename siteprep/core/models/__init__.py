"""
Domain models — typed views of configuration and host state.

All models are re-exported here for convenient access:

    from siteprep.core.models import SiteConfig, Version, AccessRule, Principal
"""

from siteprep.core.models.directory import (
    AccessRule,
    DirectoryObject,
    Principal,
    ProvisionState,
)
from siteprep.core.models.feature import FeatureCatalog, FeatureInstallResult, FeatureState
from siteprep.core.models.site import (
    AdkOptions,
    CredentialOptions,
    DirectoryOptions,
    FeatureOptions,
    PrerequisiteOptions,
    SiteConfig,
    SiteOptions,
    SqlInstanceOptions,
    WsusOptions,
)
from siteprep.core.models.version import Version

__all__ = [
    # directory.py
    "AccessRule",
    "DirectoryObject",
    "Principal",
    "ProvisionState",
    # feature.py
    "FeatureCatalog",
    "FeatureInstallResult",
    "FeatureState",
    # site.py
    "AdkOptions",
    "CredentialOptions",
    "DirectoryOptions",
    "FeatureOptions",
    "PrerequisiteOptions",
    "SiteConfig",
    "SiteOptions",
    "SqlInstanceOptions",
    "WsusOptions",
    # version.py
    "Version",
]
