"""
Error kinds — every failure that ends a procedure.

All errors are terminal: nothing catches and retries them. Each one
carries enough context (target, expected vs. observed state) for an
operator to finish the step by hand.

Non-fatal conditions are NOT errors — they are warnings recorded on
the ``RunContext`` (see ``siteprep.core.context``).
"""

from __future__ import annotations

from typing import Any


class SiteprepError(Exception):
    """Base class for all siteprep failures."""

    kind = "error"

    def __init__(
        self,
        message: str,
        *,
        target: str = "",
        expected: str = "",
        observed: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.target = target
        self.expected = expected
        self.observed = observed

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.target:
            result["target"] = self.target
        if self.expected:
            result["expected"] = self.expected
        if self.observed:
            result["observed"] = self.observed
        return result

    def __str__(self) -> str:
        parts = [self.message]
        if self.target:
            parts.append(f"target={self.target}")
        if self.expected or self.observed:
            parts.append(f"expected={self.expected or '-'} observed={self.observed or '-'}")
        return " | ".join(parts)


class ConfigError(SiteprepError):
    """Configuration is invalid."""

    kind = "config_error"


class ConfigurationMissing(ConfigError):
    """A required input file, path or catalog is absent."""

    kind = "configuration_missing"


class LookupFailed(SiteprepError):
    """A namespace root or required object could not be resolved."""

    kind = "lookup_failed"


class CreationFailed(SiteprepError):
    """A write was accepted but is not observable afterwards."""

    kind = "creation_failed"


class AccessDenied(SiteprepError):
    """The acting credential lacks rights for the operation."""

    kind = "access_denied"


class VersionIncompatible(SiteprepError):
    """An installed tool version requires a dependency that is not available."""

    kind = "version_incompatible"


class CommandFailed(SiteprepError):
    """A synchronous host command exited non-zero."""

    kind = "command_failed"
