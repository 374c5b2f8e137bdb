"""
Mock adapters — in-memory doubles for every host interface.

Used by tests and by ``--mock`` mode to exercise whole procedures
without touching a Windows host. Each fake keeps a call log so tests
can assert exactly which reads and writes happened.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from siteprep.core.errors import AccessDenied, ConfigurationMissing, LookupFailed
from siteprep.core.models.directory import AccessRule, DirectoryObject, Principal
from siteprep.core.models.feature import FeatureInstallResult, FeatureState
from siteprep.core.models.version import Version

# ── Command runner ──────────────────────────────────────────────


class MockRunner:
    """Scripted command runner.

    Responses are matched by substring against the joined command line,
    first match wins. Unmatched commands succeed with empty output.
    """

    def __init__(self) -> None:
        self._responses: list[tuple[str, subprocess.CompletedProcess[str]]] = []
        self._call_log: list[tuple[list[str], dict[str, str]]] = []

    @property
    def call_log(self) -> list[tuple[list[str], dict[str, str]]]:
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def last_command(self) -> str:
        return " ".join(self._call_log[-1][0]) if self._call_log else ""

    def set_response(self, match: str, stdout: str = "", *, returncode: int = 0, stderr: str = "") -> None:
        self._responses.append(
            (match, subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr))
        )

    def run(
        self,
        command: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> subprocess.CompletedProcess[str]:
        self._call_log.append((list(command), dict(env or {})))
        line = " ".join(command)
        for match, response in self._responses:
            if match in line:
                return response
        return subprocess.CompletedProcess(args=list(command), returncode=0, stdout="", stderr="")

    def reset(self) -> None:
        self._responses.clear()
        self._call_log.clear()


# ── Features ────────────────────────────────────────────────────


class MockFeatureInventory:
    def __init__(
        self,
        installed: Sequence[str] = (),
        absent: Sequence[str] = (),
        *,
        available: bool = True,
        restart_needed: bool = False,
    ) -> None:
        self.states: dict[str, FeatureState] = {n: FeatureState.ABSENT for n in absent}
        self.states.update({n: FeatureState.INSTALLED for n in installed})
        self.available = available
        self.restart_needed = restart_needed
        self.install_calls: list[list[str]] = []
        self.catalog_calls = 0

    def catalog(self) -> dict[str, FeatureState]:
        self.catalog_calls += 1
        if not self.available:
            raise ConfigurationMissing("Feature catalog unavailable (mock)", target="mock")
        return dict(self.states)

    def install(self, names: Sequence[str], *, source: str | None = None) -> FeatureInstallResult:
        self.install_calls.append(list(names))
        for name in names:
            self.states[name] = FeatureState.INSTALLED
        return FeatureInstallResult(
            requested=list(names),
            success=True,
            restart_needed=self.restart_needed,
            exit_code="Success",
        )


# ── Processes ───────────────────────────────────────────────────


class MockProcessTable:
    """Process table where each image stays alive for a set number of checks."""

    def __init__(self) -> None:
        self._remaining: dict[str, int] = {}
        self.checks: list[str] = []

    def start(self, image_name: str, alive_checks: int) -> None:
        self._remaining[image_name.lower()] = alive_checks

    def is_running(self, image_name: str) -> bool:
        self.checks.append(image_name)
        key = image_name.lower()
        left = self._remaining.get(key, 0)
        if left > 0:
            self._remaining[key] = left - 1
            return True
        return False


class MockLauncher:
    """Records launches; optionally registers the image on a process table."""

    def __init__(self, processes: MockProcessTable | None = None, alive_checks: int = 0) -> None:
        self._processes = processes
        self._alive_checks = alive_checks
        self.launches: list[tuple[str, list[str]]] = []

    def launch(self, executable: str, args: Sequence[str]) -> None:
        self.launches.append((executable, list(args)))
        if self._processes is not None:
            image = executable.replace("/", "\\").rsplit("\\", 1)[-1]
            self._processes.start(image, self._alive_checks)


# ── Filesystem / services ───────────────────────────────────────


class MockFileSystem:
    def __init__(
        self,
        files: Sequence[str] = (),
        populated_dirs: Sequence[str] = (),
        versions: Mapping[str, str] | None = None,
    ) -> None:
        self.files: set[str] = set(files)
        self.populated_dirs: set[str] = set(populated_dirs)
        self.dirs: set[str] = set(populated_dirs)
        self.versions: dict[str, str] = dict(versions or {})
        self.written: dict[str, str] = {}

    def exists(self, path: str) -> bool:
        return path in self.files or path in self.dirs or path in self.written

    def has_entries(self, path: str) -> bool:
        return path in self.populated_dirs

    def ensure_dir(self, path: str) -> None:
        self.dirs.add(path)

    def write_text(self, path: str, text: str) -> None:
        self.written[path] = text

    def file_version(self, path: str) -> Version:
        if path not in self.files:
            raise ConfigurationMissing("File not found", target=path)
        raw = self.versions.get(path)
        if raw is None:
            raise ConfigurationMissing("File carries no version metadata", target=path)
        return Version.parse(raw)


class MockServiceProbe:
    def __init__(self, services: Sequence[str] = ()) -> None:
        self.services = {s.lower() for s in services}

    def exists(self, service_name: str) -> bool:
        return service_name.lower() in self.services


# ── Directory ───────────────────────────────────────────────────


@dataclass
class _Node:
    obj: DirectoryObject
    children: list[str] = field(default_factory=list)
    rules: list[AccessRule] = field(default_factory=list)


class MockDirectory:
    """In-memory directory tree.

    Knobs for failure paths:
        root: ``None`` makes ``root_context`` fail with LookupFailed.
        drop_creates: accept ``create_child`` but never store the object.
        deny_writes: writes raise AccessDenied.
        auto_principals: unknown identities resolve to generated SIDs.
    """

    def __init__(
        self,
        root: str | None = "DC=example,DC=com",
        *,
        principals: Sequence[Principal] = (),
        drop_creates: bool = False,
        deny_writes: bool = False,
        auto_principals: bool = False,
    ) -> None:
        self.root = root
        self.principals = list(principals)
        self.drop_creates = drop_creates
        self.deny_writes = deny_writes
        self.auto_principals = auto_principals
        self.nodes: dict[str, _Node] = {}
        self.reads: list[str] = []
        self.writes: list[str] = []
        self.closed = False
        if root:
            self.nodes[root.lower()] = _Node(DirectoryObject(distinguished_name=root, name=root, object_class="domainDNS"))

    # ── Fixture helpers ─────────────────────────────────────────

    def add_object(self, parent_dn: str, object_class: str, name: str) -> DirectoryObject:
        dn = f"CN={name},{parent_dn}"
        obj = DirectoryObject(distinguished_name=dn, name=name, object_class=object_class)
        self.nodes[dn.lower()] = _Node(obj)
        parent = self.nodes.get(parent_dn.lower())
        if parent is not None:
            parent.children.append(dn.lower())
        return obj

    def add_rule(self, dn: str, rule: AccessRule) -> None:
        self.nodes[dn.lower()].rules.append(rule)

    def rules_for(self, dn: str) -> list[AccessRule]:
        return list(self.nodes[dn.lower()].rules)

    @property
    def write_count(self) -> int:
        return len(self.writes)

    # ── Accessor interface ──────────────────────────────────────

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> MockDirectory:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def root_context(self) -> str:
        self.reads.append("root")
        if not self.root:
            raise LookupFailed("Directory root could not be resolved (mock)", target="mock")
        return self.root

    def search(self, base_dn: str, object_class: str, name: str) -> list[DirectoryObject]:
        self.reads.append(f"search:{base_dn}")
        parent = self.nodes.get(base_dn.lower())
        if parent is None:
            return []
        found = []
        for child_dn in parent.children:
            obj = self.nodes[child_dn].obj
            if obj.object_class.lower() == object_class.lower() and obj.name.lower() == name.lower():
                found.append(obj)
        return found

    def create_child(self, parent_dn: str, object_class: str, name: str) -> None:
        self._check_write(f"create:{name}")
        if self.drop_creates:
            return
        if parent_dn.lower() not in self.nodes:
            raise LookupFailed("Parent object not found (mock)", target=parent_dn)
        self.add_object(parent_dn, object_class, name)

    def children(self, obj: DirectoryObject) -> list[DirectoryObject]:
        self.reads.append(f"children:{obj.distinguished_name}")
        node = self.nodes.get(obj.distinguished_name.lower())
        return [self.nodes[c].obj for c in node.children] if node else []

    def access_rules(self, obj: DirectoryObject) -> list[AccessRule]:
        self.reads.append(f"acl:{obj.distinguished_name}")
        node = self.nodes.get(obj.distinguished_name.lower())
        if node is None:
            raise LookupFailed("Object not found (mock)", target=obj.distinguished_name)
        return list(node.rules)

    def add_access_rule(self, obj: DirectoryObject, rule: AccessRule) -> None:
        self._check_write(f"acl:{obj.distinguished_name}")
        self.nodes[obj.distinguished_name.lower()].rules.append(rule)

    def resolve_principal(self, identity: str) -> Principal:
        self.reads.append(f"principal:{identity}")
        for principal in self.principals:
            if principal.matches(identity):
                return principal
        if self.auto_principals:
            principal = Principal(
                sid=f"S-1-5-21-1000-1000-1000-{1100 + len(self.principals)}",
                account_name=identity,
            )
            self.principals.append(principal)
            return principal
        raise LookupFailed("Principal could not be resolved (mock)", target=identity)

    def _check_write(self, what: str) -> None:
        if self.deny_writes:
            raise AccessDenied("Insufficient access rights (mock)", target=what)
        self.writes.append(what)
