"""
Feature models — installed-component snapshots and install outcomes.

A ``FeatureCatalog`` is a plain mapping ``identifier → FeatureState``
fetched once per run from the host. It is never mutated; the resolver
only compares against it.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from pydantic import BaseModel, Field


class FeatureState(str, Enum):
    """Install state of one optional OS component."""

    ABSENT = "absent"
    INSTALLED = "installed"

    @classmethod
    def from_installed(cls, installed: bool) -> FeatureState:
        return cls.INSTALLED if installed else cls.ABSENT


FeatureCatalog = Mapping[str, FeatureState]


class FeatureInstallResult(BaseModel):
    """Outcome of one feature install command."""

    requested: list[str] = Field(default_factory=list)
    success: bool = True
    restart_needed: bool = False
    exit_code: str = ""
