"""
Directory use case — create the System Management container and grant
the site server full control on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from siteprep.adapters.registry import HostRegistry
from siteprep.core.context import RunContext
from siteprep.core.errors import ConfigurationMissing
from siteprep.core.models.site import SiteConfig
from siteprep.core.services.directory import ContainerTarget, ProvisionResult, provision_container


@dataclass
class DirectoryResult:
    identity: str = ""
    provision: ProvisionResult = field(default_factory=ProvisionResult)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"identity": self.identity, **self.provision.to_dict(), "warnings": self.warnings}


def provision_directory(config: SiteConfig, host: HostRegistry) -> DirectoryResult:
    """Find-or-create the container and grant the configured principal.

    The directory session is closed on every exit path.

    Raises:
        ConfigurationMissing: No principal and no site server name configured.
        LookupFailed / CreationFailed / AccessDenied: see the provisioner.
    """
    identity = config.directory_principal()
    if not identity:
        raise ConfigurationMissing(
            "Set directory.principal or site.server_name to name the account to grant",
            target="directory.principal",
        )

    options = config.directory
    target = ContainerTarget(
        name=options.container_name,
        object_class=options.container_class,
        parent=options.parent,
    )

    with RunContext("ad-container") as ctx:
        accessor = ctx.track(host.directory(options))
        provision = provision_container(accessor, target, identity, ctx)

    return DirectoryResult(identity=identity, provision=provision, warnings=list(ctx.warnings))
