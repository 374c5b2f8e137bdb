"""
Adapter base — the contract between the procedures and the host.

Core code only talks to the host through these interfaces, never
through subprocess, PowerShell or the filesystem directly. Each one has
a Windows implementation (``siteprep.adapters.windows``) and an
in-memory fake (``siteprep.adapters.mock``) used by tests and ``--mock``.

Implementations RAISE: every failure is a ``SiteprepError`` and ends
the procedure. Nothing is retried.
"""

from __future__ import annotations

import subprocess
from typing import Mapping, Protocol, Sequence

from siteprep.core.models.directory import AccessRule, DirectoryObject, Principal
from siteprep.core.models.feature import FeatureInstallResult, FeatureState
from siteprep.core.models.version import Version


class CommandRunner(Protocol):
    def run(
        self,
        command: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> subprocess.CompletedProcess[str]:  # pragma: no cover - protocol
        ...


class FeatureInventory(Protocol):
    """OS component catalog: query and install."""

    def catalog(self) -> dict[str, FeatureState]:  # pragma: no cover - protocol
        """Snapshot of every known feature.

        Raises:
            ConfigurationMissing: The catalog source cannot be read.
        """
        ...

    def install(
        self,
        names: Sequence[str],
        *,
        source: str | None = None,
    ) -> FeatureInstallResult:  # pragma: no cover - protocol
        ...


class ProcessLauncher(Protocol):
    def launch(self, executable: str, args: Sequence[str]) -> None:  # pragma: no cover - protocol
        """Start a process and return immediately."""
        ...


class ProcessTable(Protocol):
    def is_running(self, image_name: str) -> bool:  # pragma: no cover - protocol
        ...


class FileSystem(Protocol):
    def exists(self, path: str) -> bool:  # pragma: no cover - protocol
        ...

    def has_entries(self, path: str) -> bool:  # pragma: no cover - protocol
        """Whether ``path`` is a directory with at least one entry."""
        ...

    def ensure_dir(self, path: str) -> None:  # pragma: no cover - protocol
        ...

    def write_text(self, path: str, text: str) -> None:  # pragma: no cover - protocol
        ...

    def file_version(self, path: str) -> Version:  # pragma: no cover - protocol
        """Four-part version from a binary's metadata.

        Raises:
            ConfigurationMissing: File absent or carries no version.
        """
        ...


class ServiceProbe(Protocol):
    def exists(self, service_name: str) -> bool:  # pragma: no cover - protocol
        ...


class DirectoryAccessor(Protocol):
    """Typed access to a hierarchical directory store.

    Implementations own a session and are context managers; callers
    register them on the ``RunContext`` so they are closed on every
    exit path.
    """

    def root_context(self) -> str:  # pragma: no cover - protocol
        """Distinguished name of the namespace root.

        Raises:
            LookupFailed: The root cannot be resolved.
        """
        ...

    def search(
        self,
        base_dn: str,
        object_class: str,
        name: str,
    ) -> list[DirectoryObject]:  # pragma: no cover - protocol
        """Direct children of ``base_dn`` with this class and exact name."""
        ...

    def create_child(self, parent_dn: str, object_class: str, name: str) -> None:  # pragma: no cover - protocol
        ...

    def children(self, obj: DirectoryObject) -> list[DirectoryObject]:  # pragma: no cover - protocol
        ...

    def access_rules(self, obj: DirectoryObject) -> list[AccessRule]:  # pragma: no cover - protocol
        ...

    def add_access_rule(self, obj: DirectoryObject, rule: AccessRule) -> None:  # pragma: no cover - protocol
        ...

    def resolve_principal(self, identity: str) -> Principal:  # pragma: no cover - protocol
        """Resolve an account name or SID.

        Raises:
            LookupFailed: The identity does not exist.
        """
        ...

    def close(self) -> None:  # pragma: no cover - protocol
        ...

    def __enter__(self) -> DirectoryAccessor:  # pragma: no cover - protocol
        ...

    def __exit__(self, *exc_info: object) -> None:  # pragma: no cover - protocol
        ...
