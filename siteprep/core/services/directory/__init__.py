"""Directory provisioning — find-or-create plus additive ACL grants."""

from siteprep.core.services.directory.provisioner import (  # noqa: F401
    ContainerTarget,
    ProvisionResult,
    has_principal,
    provision_container,
)
