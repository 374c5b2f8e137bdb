"""
Idempotent directory provisioner — find-or-create a container, then
grant a principal full control on it exactly once.

Flow (one target object)::

    NotSearched ─search─▶ Found ───────────────┐
         │                                      ▼
         └──create + re-search─▶ Created ─▶ read ACL ─▶ PermissionPresent ─▶ Done
                                                   └──▶ PermissionAbsent ─add rule─▶ Done

No write happens before the object is confirmed to exist, and the ACL
is only ever appended to, never replaced. Running the procedure again
after success performs reads only and reports "already present".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from siteprep.adapters.base import DirectoryAccessor
from siteprep.core.context import RunContext
from siteprep.core.errors import CreationFailed, LookupFailed
from siteprep.core.models.directory import AccessRule, DirectoryObject, Principal, ProvisionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainerTarget:
    """What to provision: ``CN=<name>,<parent>,<root>`` of ``object_class``."""

    name: str
    object_class: str = "container"
    parent: str = "CN=System"       # RDN(s) below the namespace root; "" = root itself


@dataclass
class ProvisionResult:
    """Outcome of one provisioner run."""

    container: DirectoryObject | None = None
    principal: Principal | None = None
    created: bool = False
    permission_added: bool = False
    states: list[ProvisionState] = field(default_factory=lambda: [ProvisionState.NOT_SEARCHED])

    @property
    def state(self) -> ProvisionState:
        return self.states[-1]

    @property
    def already_present(self) -> bool:
        return not self.created and not self.permission_added

    def advance(self, state: ProvisionState) -> None:
        logger.debug("Provisioner: %s → %s", self.state.value, state.value)
        self.states.append(state)

    def to_dict(self) -> dict:
        return {
            "container": self.container.distinguished_name if self.container else None,
            "principal": self.principal.model_dump() if self.principal else None,
            "created": self.created,
            "permission_added": self.permission_added,
            "already_present": self.already_present,
            "states": [s.value for s in self.states],
        }


def has_principal(rules: list[AccessRule], principal: Principal) -> bool:
    """Whether any rule already names ``principal`` (by SID or account name)."""
    return any(principal.matches(rule.identity) for rule in rules)


def find_or_create(
    accessor: DirectoryAccessor,
    target: ContainerTarget,
    result: ProvisionResult,
) -> DirectoryObject:
    """Locate the target object, creating it once if absent.

    Raises:
        LookupFailed: The namespace root cannot be resolved.
        CreationFailed: The create was accepted but the object is not
            visible on the verification search.
    """
    root = accessor.root_context()
    if not root:
        raise LookupFailed("Directory root resolved to an empty name", target="root")
    parent_dn = f"{target.parent},{root}" if target.parent else root

    found = accessor.search(parent_dn, target.object_class, target.name)
    if found:
        result.advance(ProvisionState.FOUND)
        logger.info("Found existing %s", found[0].distinguished_name)
        return found[0]

    logger.info("%s '%s' not found under %s, creating", target.object_class, target.name, parent_dn)
    accessor.create_child(parent_dn, target.object_class, target.name)

    found = accessor.search(parent_dn, target.object_class, target.name)
    if not found:
        raise CreationFailed(
            "Directory accepted the create but the object is not visible",
            target=f"CN={target.name},{parent_dn}",
            expected="object present after create",
            observed="search returned no results",
        )
    result.created = True
    result.advance(ProvisionState.CREATED)
    return found[0]


def ensure_permission(
    accessor: DirectoryAccessor,
    obj: DirectoryObject,
    principal: Principal,
    result: ProvisionResult,
    ctx: RunContext,
) -> None:
    """Append a full-control rule for ``principal`` unless one exists."""
    rules = accessor.access_rules(obj)

    if has_principal(rules, principal):
        result.advance(ProvisionState.PERMISSION_PRESENT)
        ctx.warn(
            f"{principal.account_name or principal.sid} already has an entry on "
            f"{obj.distinguished_name}; please verify it grants full control"
        )
        result.advance(ProvisionState.DONE)
        return

    result.advance(ProvisionState.PERMISSION_ABSENT)
    accessor.add_access_rule(obj, AccessRule.full_control(principal))
    result.permission_added = True
    logger.info("Granted full control on %s to %s", obj.distinguished_name, principal.account_name or principal.sid)
    result.advance(ProvisionState.DONE)


def provision_container(
    accessor: DirectoryAccessor,
    target: ContainerTarget,
    identity: str,
    ctx: RunContext,
) -> ProvisionResult:
    """Find-or-create ``target`` and grant ``identity`` full control on it.

    Args:
        accessor: Open directory session (owned by the caller).
        target: Container to provision.
        identity: Account name or SID to grant.
        ctx: Run context for warnings and flags.

    Raises:
        LookupFailed: Root or principal cannot be resolved.
        CreationFailed: Create not observable afterwards.
        AccessDenied: Credential lacks rights to read or write.
    """
    result = ProvisionResult()

    # Grantee must resolve before any write.
    principal = accessor.resolve_principal(identity)
    result.principal = principal

    obj = find_or_create(accessor, target, result)
    result.container = obj

    ensure_permission(accessor, obj, principal, result, ctx)

    ctx.set_flag("container_created", result.created)
    ctx.set_flag("permission_added", result.permission_added)
    return result
