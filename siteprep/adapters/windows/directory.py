"""
Active Directory accessor — ActiveDirectory PowerShell module.

Each call is one PowerShell invocation with the common parameters
(``-Server`` / ``-Credential``) splatted in. ACLs are read and written
through a dedicated ``SPAD:`` provider drive so that the alternate
server and credential apply to them as well.

Credentials reach PowerShell through environment variables only.
"""

from __future__ import annotations

import logging

from siteprep.adapters.base import CommandRunner
from siteprep.adapters.shell.command import PowerShellResult, ps_quote, run_powershell
from siteprep.core.errors import AccessDenied, CommandFailed, LookupFailed, SiteprepError
from siteprep.core.models.directory import AccessRule, DirectoryObject, Principal

logger = logging.getLogger(__name__)

_USER_ENV = "SITEPREP_PS_USER"
_PASSWORD_ENV = "SITEPREP_PS_PASSWORD"

_DENIED_MARKERS = (
    "access is denied",
    "unauthorizedaccess",
    "insufficient access rights",
    "access denied",
)
_LOOKUP_MARKERS = (
    "unable to contact the server",
    "server is not operational",
    "cannot find an object",
    "directory object not found",
    "cannot find drive",
    "could not be translated",
    "adserverdown",
    "adidentitynotfound",
)

_SELECT_OBJECT = (
    "Select-Object DistinguishedName, Name, ObjectClass | ConvertTo-Json -Compress"
)


def ldap_escape(value: str) -> str:
    """Escape a value for use inside an LDAP filter (RFC 4515)."""
    out = []
    for ch in value:
        if ch in "\\*()\x00":
            out.append(f"\\{ord(ch):02x}")
        else:
            out.append(ch)
    return "".join(out)


def classify_failure(result: PowerShellResult, message: str, target: str) -> SiteprepError:
    """Map a failed directory call to an error kind."""
    text = result.error_text
    lowered = text.lower()
    if any(marker in lowered for marker in _DENIED_MARKERS):
        return AccessDenied(message, target=target, observed=text[:500])
    if any(marker in lowered for marker in _LOOKUP_MARKERS):
        return LookupFailed(message, target=target, observed=text[:500])
    return CommandFailed(message, target=target, observed=text[:500])


class PowerShellDirectory:
    """Directory accessor backed by the ActiveDirectory module."""

    def __init__(
        self,
        runner: CommandRunner,
        *,
        server: str | None = None,
        credential: tuple[str, str] | None = None,
    ) -> None:
        self._runner = runner
        self._server = server
        self._credential = credential if credential and credential[0] else None
        self._closed = False

    # ── Session ─────────────────────────────────────────────────

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> PowerShellDirectory:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Script plumbing ─────────────────────────────────────────

    def _prelude(self, *, drive: bool = False) -> str:
        lines = ["Import-Module ActiveDirectory", "$p = @{}"]
        if self._server:
            lines.append(f"$p.Server = {ps_quote(self._server)}")
        if self._credential:
            lines.append(
                "$p.Credential = New-Object System.Management.Automation.PSCredential("
                f"$env:{_USER_ENV}, (ConvertTo-SecureString $env:{_PASSWORD_ENV} -AsPlainText -Force))"
            )
        if drive:
            lines.append(
                "$d = @{Name = 'SPAD'; PSProvider = 'ActiveDirectory'; Root = '//RootDSE/'} + $p"
            )
            lines.append("New-PSDrive @d | Out-Null")
        return "; ".join(lines) + "; "

    def _env(self) -> dict[str, str] | None:
        if not self._credential:
            return None
        user, password = self._credential
        return {_USER_ENV: user, _PASSWORD_ENV: password}

    def _run(self, body: str, *, drive: bool = False) -> PowerShellResult:
        if self._closed:
            raise RuntimeError("directory session is closed")
        return run_powershell(self._runner, self._prelude(drive=drive) + body, env=self._env())

    @staticmethod
    def _objects(result: PowerShellResult) -> list[DirectoryObject]:
        objects = []
        for record in result.records():
            dn = record.get("DistinguishedName")
            if not dn:
                continue
            objects.append(
                DirectoryObject(
                    distinguished_name=str(dn),
                    name=str(record.get("Name") or ""),
                    object_class=str(record.get("ObjectClass") or ""),
                )
            )
        return objects

    # ── Accessor interface ──────────────────────────────────────

    def root_context(self) -> str:
        result = self._run("(Get-ADDomain @p).DistinguishedName")
        root = result.text
        if result.ok and root:
            return root
        error = classify_failure(result, "Directory root could not be resolved", self._server or "default")
        if isinstance(error, AccessDenied):
            raise error
        raise LookupFailed(error.message, target=error.target, observed=error.observed)

    def search(self, base_dn: str, object_class: str, name: str) -> list[DirectoryObject]:
        ldap_filter = f"(&(objectClass={ldap_escape(object_class)})(name={ldap_escape(name)}))"
        result = self._run(
            f"Get-ADObject @p -SearchBase {ps_quote(base_dn)} -SearchScope OneLevel "
            f"-LDAPFilter {ps_quote(ldap_filter)} | {_SELECT_OBJECT}"
        )
        if not result.ok:
            raise classify_failure(result, "Directory search failed", base_dn)
        return self._objects(result)

    def create_child(self, parent_dn: str, object_class: str, name: str) -> None:
        logger.info("Creating %s '%s' under %s", object_class, name, parent_dn)
        result = self._run(
            f"New-ADObject @p -Type {ps_quote(object_class)} -Name {ps_quote(name)} "
            f"-Path {ps_quote(parent_dn)}"
        )
        if not result.ok:
            raise classify_failure(result, "Directory object creation failed", f"CN={name},{parent_dn}")

    def children(self, obj: DirectoryObject) -> list[DirectoryObject]:
        result = self._run(
            f"Get-ADObject @p -SearchBase {ps_quote(obj.distinguished_name)} "
            f"-SearchScope OneLevel -Filter * | {_SELECT_OBJECT}"
        )
        if not result.ok:
            raise classify_failure(result, "Listing children failed", obj.distinguished_name)
        return self._objects(result)

    def access_rules(self, obj: DirectoryObject) -> list[AccessRule]:
        path = ps_quote("SPAD:\\" + obj.distinguished_name)
        result = self._run(
            f"(Get-Acl -Path {path}).Access | ForEach-Object {{ [pscustomobject]@{{ "
            "identity = $_.IdentityReference.Value; "
            "rights = $_.ActiveDirectoryRights.ToString(); "
            "effect = $_.AccessControlType.ToString(); "
            "inheritance = $_.InheritanceType.ToString() } } | ConvertTo-Json -Compress",
            drive=True,
        )
        if not result.ok:
            raise classify_failure(result, "Reading access rules failed", obj.distinguished_name)
        return [
            AccessRule(
                identity=str(r.get("identity") or ""),
                rights=str(r.get("rights") or ""),
                effect=str(r.get("effect") or ""),
                inheritance=str(r.get("inheritance") or ""),
            )
            for r in result.records()
        ]

    def add_access_rule(self, obj: DirectoryObject, rule: AccessRule) -> None:
        path = ps_quote("SPAD:\\" + obj.distinguished_name)
        logger.info("Granting %s %s to %s on %s", rule.effect, rule.rights, rule.identity, obj.distinguished_name)
        result = self._run(
            f"$acl = Get-Acl -Path {path}; "
            f"$sid = New-Object System.Security.Principal.SecurityIdentifier({ps_quote(rule.identity)}); "
            "$rule = New-Object System.DirectoryServices.ActiveDirectoryAccessRule("
            f"$sid, [System.DirectoryServices.ActiveDirectoryRights]{ps_quote(rule.rights)}, "
            f"[System.Security.AccessControl.AccessControlType]{ps_quote(rule.effect)}, "
            f"[System.DirectoryServices.ActiveDirectorySecurityInheritance]{ps_quote(rule.inheritance)}); "
            "$acl.AddAccessRule($rule); "
            f"Set-Acl -Path {path} -AclObject $acl",
            drive=True,
        )
        if not result.ok:
            raise classify_failure(result, "Writing access rule failed", obj.distinguished_name)

    def resolve_principal(self, identity: str) -> Principal:
        if identity.upper().startswith("S-1-"):
            sid_expr = f"New-Object System.Security.Principal.SecurityIdentifier({ps_quote(identity)})"
        else:
            sid_expr = (
                f"(New-Object System.Security.Principal.NTAccount({ps_quote(identity)}))"
                ".Translate([System.Security.Principal.SecurityIdentifier])"
            )
        result = self._run(
            f"$s = {sid_expr}; "
            "$n = try { $s.Translate([System.Security.Principal.NTAccount]).Value } catch { '' }; "
            "[pscustomobject]@{ sid = $s.Value; account = $n } | ConvertTo-Json -Compress"
        )
        records = result.records() if result.ok else []
        if not records or not records[0].get("sid"):
            error = classify_failure(result, "Principal could not be resolved", identity)
            if isinstance(error, AccessDenied):
                raise error
            raise LookupFailed(error.message, target=identity, observed=error.observed)
        record = records[0]
        return Principal(sid=str(record["sid"]), account_name=str(record.get("account") or identity))
