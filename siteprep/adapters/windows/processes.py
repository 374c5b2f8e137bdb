"""
Process adapters — fire-and-forget launch and liveness by image name.

Installers such as ``adksetup.exe`` spawn child processes and return
early, so completion is observed by polling the process table for the
image name, never through the launched handle's exit code.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from siteprep.adapters.base import CommandRunner
from siteprep.core.errors import CommandFailed, ConfigurationMissing

logger = logging.getLogger(__name__)


class PopenLauncher:
    """Start a process detached from our stdio."""

    def launch(self, executable: str, args: Sequence[str]) -> None:
        logger.info("Launching %s %s", executable, " ".join(args))
        try:
            subprocess.Popen(
                [executable, *args],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except FileNotFoundError as exc:
            raise ConfigurationMissing(
                "Installer executable not found",
                target=executable,
                observed=str(exc),
            ) from exc


class TasklistProcessTable:
    """Liveness check via ``tasklist``."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def is_running(self, image_name: str) -> bool:
        completed = self._runner.run(
            ["tasklist", "/FI", f"IMAGENAME eq {image_name}", "/NH", "/FO", "CSV"]
        )
        if completed.returncode != 0:
            raise CommandFailed(
                "tasklist failed",
                target=image_name,
                observed=(completed.stderr or completed.stdout or "").strip()[:200],
            )
        return _listed(completed.stdout or "", image_name)


def _listed(output: str, image_name: str) -> bool:
    """Whether ``tasklist /FO CSV`` output lists ``image_name``."""
    wanted = f'"{image_name.lower()}"'
    for line in output.splitlines():
        first = line.strip().split(",", 1)[0].lower()
        if first == wanted:
            return True
    return False
