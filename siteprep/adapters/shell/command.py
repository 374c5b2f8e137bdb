"""
Shell command adapter — run host commands and PowerShell scripts.

This is the SINGLE PLACE where ``subprocess.run`` is called. Every
Windows adapter builds a command (usually a PowerShell script) and
hands it to a ``CommandRunner``; tests swap in ``MockRunner``.

Secrets (alternate credentials) travel through ``env``, never through
command arguments, so they never show up in logs or process listings.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from siteprep.adapters.base import CommandRunner
from siteprep.core.errors import CommandFailed, ConfigurationMissing

logger = logging.getLogger(__name__)

POWERSHELL: tuple[str, ...] = (
    "powershell.exe",
    "-NoProfile",
    "-NonInteractive",
    "-ExecutionPolicy",
    "Bypass",
    "-Command",
)

# Warning and progress streams are written to stdout when it is redirected.
_PREAMBLE = (
    "$ErrorActionPreference = 'Stop'; "
    "$WarningPreference = 'SilentlyContinue'; "
    "$ProgressPreference = 'SilentlyContinue'; "
)
_STREAM_PREFIXES = ("WARNING:", "VERBOSE:", "DEBUG:")


class SubprocessRunner:
    """Run a command to completion and capture its output."""

    def __init__(self, timeout: int | None = None) -> None:
        self._timeout = timeout

    def run(
        self,
        command: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> subprocess.CompletedProcess[str]:
        merged = os.environ.copy()
        if env:
            merged.update(env)
        logger.debug("Executing: %s", command[0] if command else "")
        return subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            check=False,
            env=merged,
            timeout=self._timeout,
        )


@dataclass
class PowerShellResult:
    """Captured outcome of one PowerShell invocation."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def text(self) -> str:
        """stdout without stray warning/verbose/debug stream lines."""
        lines = [
            line for line in self.stdout.splitlines()
            if not line.lstrip().upper().startswith(_STREAM_PREFIXES)
        ]
        return "\n".join(lines).strip()

    def json(self) -> Any:
        """Parse stdout as JSON (``None`` when empty).

        Raises:
            CommandFailed: stdout is not JSON.
        """
        text = self.text
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise CommandFailed(
                "PowerShell returned output that is not JSON",
                expected="JSON",
                observed=self.stdout[:300],
            ) from exc

    def records(self) -> list[dict[str, Any]]:
        """JSON output normalised to a list of objects.

        ``ConvertTo-Json`` emits a bare object for a single result and
        an array for several. Scalars yield no records.

        Raises:
            CommandFailed: stdout is not JSON.
        """
        data = self.json()
        if isinstance(data, dict):
            return [data]
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]

    @property
    def error_text(self) -> str:
        return (self.stderr or self.stdout).strip()


def ps_quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


def run_powershell(
    runner: CommandRunner,
    script: str,
    *,
    env: Mapping[str, str] | None = None,
) -> PowerShellResult:
    """Run ``script`` with terminating errors enabled.

    Raises:
        ConfigurationMissing: PowerShell itself is not available.
    """
    command = [*POWERSHELL, _PREAMBLE + script]
    try:
        completed = runner.run(command, env=env)
    except FileNotFoundError as exc:
        raise ConfigurationMissing(
            "PowerShell is not available on this host",
            target=POWERSHELL[0],
            observed=str(exc),
        ) from exc
    result = PowerShellResult(
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    if not result.ok:
        logger.debug("PowerShell exited %d: %s", result.returncode, result.error_text[:500])
    return result
