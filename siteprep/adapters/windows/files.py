"""
Filesystem adapter — local paths plus binary version metadata.
"""

from __future__ import annotations

import logging
from pathlib import Path

from siteprep.adapters.base import CommandRunner
from siteprep.adapters.shell.command import ps_quote, run_powershell
from siteprep.core.errors import ConfigurationMissing
from siteprep.core.models.version import Version

logger = logging.getLogger(__name__)


class LocalFileSystem:
    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def has_entries(self, path: str) -> bool:
        p = Path(path)
        if not p.is_dir():
            return False
        return any(p.iterdir())

    def ensure_dir(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def write_text(self, path: str, text: str) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        logger.debug("Wrote %s (%d bytes)", p, len(text))

    def file_version(self, path: str) -> Version:
        if not self.exists(path):
            raise ConfigurationMissing("File not found", target=path)

        result = run_powershell(
            self._runner,
            f"(Get-Item -LiteralPath {ps_quote(path)}).VersionInfo.FileVersion",
        )
        raw = result.text
        if not result.ok or not raw:
            raise ConfigurationMissing(
                "File carries no version metadata",
                target=path,
                observed=result.error_text[:200],
            )
        try:
            return Version.parse(raw)
        except ValueError as exc:
            raise ConfigurationMissing(
                "Unreadable file version",
                target=path,
                observed=raw,
            ) from exc
