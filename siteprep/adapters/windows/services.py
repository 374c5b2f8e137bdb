"""
Service probe — does a Windows service exist?
"""

from __future__ import annotations

from siteprep.adapters.base import CommandRunner
from siteprep.core.errors import CommandFailed

# sc.exe: "The specified service does not exist as an installed service."
_ERROR_SERVICE_DOES_NOT_EXIST = 1060


class ScServiceProbe:
    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def exists(self, service_name: str) -> bool:
        completed = self._runner.run(["sc.exe", "query", service_name])
        if completed.returncode == 0:
            return True
        if completed.returncode == _ERROR_SERVICE_DOES_NOT_EXIST:
            return False
        raise CommandFailed(
            "Service query failed",
            target=service_name,
            observed=(completed.stdout or completed.stderr or "").strip()[:200],
        )
