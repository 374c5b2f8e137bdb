"""
Directory models — objects, principals and access rules.

These are typed views over whatever the directory store hands back.
The provisioner never touches raw store objects; it only sees these.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

FULL_CONTROL = "GenericAll"
ALLOW = "Allow"
INHERIT_ALL = "All"


class DirectoryObject(BaseModel):
    """Handle to one node in the directory namespace."""

    model_config = ConfigDict(frozen=True)

    distinguished_name: str
    name: str = ""
    object_class: str = ""


class Principal(BaseModel):
    """A security principal: SID plus resolved account name.

    The store may reference a principal either way on an access rule,
    so both forms are kept.
    """

    model_config = ConfigDict(frozen=True)

    sid: str
    account_name: str = ""

    def matches(self, identity: str) -> bool:
        """Whether a raw identity reference refers to this principal."""
        if not identity:
            return False
        if identity == self.sid:
            return True
        return bool(self.account_name) and identity.lower() == self.account_name.lower()


class AccessRule(BaseModel):
    """One access-control entry on a directory object."""

    model_config = ConfigDict(frozen=True)

    identity: str                      # SID string or DOMAIN\account
    rights: str = FULL_CONTROL
    effect: str = ALLOW                # Allow / Deny
    inheritance: str = INHERIT_ALL     # None / All / Descendents / ...

    @classmethod
    def full_control(cls, principal: Principal) -> AccessRule:
        """Full rights, allow, applied to the whole subtree."""
        return cls(identity=principal.sid, rights=FULL_CONTROL, effect=ALLOW, inheritance=INHERIT_ALL)


class ProvisionState(str, Enum):
    """States the directory provisioner passes through."""

    NOT_SEARCHED = "not_searched"
    FOUND = "found"
    CREATED = "created"
    PERMISSION_ABSENT = "permission_absent"
    PERMISSION_PRESENT = "permission_present"
    DONE = "done"
