"""
Four-part version numbers (major.minor.build.revision).

Windows binaries report versions like ``10.1.17763.1`` — sometimes with
a trailing build tag (``10.1.17763.1 (WinBuild.160101.0800)``). Missing
trailing components count as zero, so ``10.1`` == ``10.1.0.0``.

``Version`` is a ``NamedTuple``, so comparisons are component-wise:
major, then minor, then build, then revision.
"""

from __future__ import annotations

import re
from typing import NamedTuple

_VERSION_RE = re.compile(r"^\s*v?(\d+(?:\.\d+){0,3})")


class Version(NamedTuple):
    major: int
    minor: int = 0
    build: int = 0
    revision: int = 0

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse the leading dotted number of ``text``.

        Raises:
            ValueError: If ``text`` does not start with a dotted number.
        """
        match = _VERSION_RE.match(text or "")
        if not match:
            raise ValueError(f"Not a version number: {text!r}")
        parts = [int(p) for p in match.group(1).split(".")]
        return cls(*parts)

    def __str__(self) -> str:
        return ".".join(str(p) for p in self)
