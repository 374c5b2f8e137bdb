"""
Host registry — the single place host adapters are constructed.

Use cases never build adapters themselves; they ask the registry.
In mock mode every adapter is replaced by its in-memory double, so a
full procedure can run (and be tested) on any machine.
"""

from __future__ import annotations

import logging
from typing import Any

from siteprep.adapters.base import (
    CommandRunner,
    DirectoryAccessor,
    FeatureInventory,
    FileSystem,
    ProcessLauncher,
    ProcessTable,
    ServiceProbe,
)
from siteprep.adapters.mock import (
    MockDirectory,
    MockFeatureInventory,
    MockFileSystem,
    MockLauncher,
    MockProcessTable,
    MockRunner,
    MockServiceProbe,
)
from siteprep.adapters.shell.command import SubprocessRunner
from siteprep.adapters.windows.directory import PowerShellDirectory
from siteprep.adapters.windows.features import WindowsFeatureInventory
from siteprep.adapters.windows.files import LocalFileSystem
from siteprep.adapters.windows.processes import PopenLauncher, TasklistProcessTable
from siteprep.adapters.windows.services import ScServiceProbe
from siteprep.core.data import defaults
from siteprep.core.models.site import DirectoryOptions

logger = logging.getLogger(__name__)


class HostRegistry:
    """Hands out host adapters (real or mock).

    Individual adapters can be overridden with keyword arguments, which
    is how tests inject pre-configured fakes.
    """

    def __init__(self, mock_mode: bool = False, **overrides: Any) -> None:
        self._mock_mode = mock_mode
        if mock_mode:
            processes = MockProcessTable()
            self.runner: CommandRunner = MockRunner()
            self.features: FeatureInventory = MockFeatureInventory()
            self.processes: ProcessTable = processes
            self.launcher: ProcessLauncher = MockLauncher(processes)
            self.files: FileSystem = MockFileSystem()
            self.services: ServiceProbe = MockServiceProbe()
            directory = MockDirectory(auto_principals=True)
            directory.add_object(directory.root or "", defaults.CONTAINER_CLASS, "System")
            self._directory: DirectoryAccessor | None = directory
        else:
            runner = SubprocessRunner()
            self.runner = runner
            self.features = WindowsFeatureInventory(runner)
            self.processes = TasklistProcessTable(runner)
            self.launcher = PopenLauncher()
            self.files = LocalFileSystem(runner)
            self.services = ScServiceProbe(runner)
            self._directory = None

        for name, adapter in overrides.items():
            if name == "directory":
                self._directory = adapter
            elif hasattr(self, name):
                setattr(self, name, adapter)
            else:
                raise TypeError(f"Unknown host adapter: {name}")

        logger.debug("Host registry ready (mock_mode=%s)", mock_mode)

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def directory(self, options: DirectoryOptions) -> DirectoryAccessor:
        """Open a directory session for the given options."""
        if self._directory is not None:
            return self._directory
        credential = options.credential.resolve() if options.credential else None
        return PowerShellDirectory(self.runner, server=options.server, credential=credential)
