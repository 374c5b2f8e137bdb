"""
Run context — the explicit state threaded through one procedure.

Every use case builds exactly one ``RunContext`` at entry and passes it
down to the components it calls. It holds:

    - flags resolved along the way (``addon_required``, ``restart_pending``...)
    - open external handles (directory sessions), released on every exit path
    - accumulated warnings for the operator

Usage::

    with RunContext("ad-container") as ctx:
        accessor = ctx.track(host.directory(options))
        provision_container(accessor, target, identity, ctx)
    # accessor closed here, even if provisioning raised
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RunContext:
    """Flags, handles and warnings for a single invocation."""

    operation: str = ""
    flags: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    _resources: ExitStack = field(default_factory=ExitStack, repr=False)

    def warn(self, message: str) -> None:
        """Record a non-fatal condition for the operator."""
        logger.warning("[%s] %s", self.operation or "run", message)
        self.warnings.append(message)

    def set_flag(self, name: str, value: Any) -> None:
        self.flags[name] = value

    def flag(self, name: str, default: Any = None) -> Any:
        return self.flags.get(name, default)

    def track(self, resource: T) -> T:
        """Register a handle (context manager) to close when the run ends."""
        return self._resources.enter_context(resource)  # type: ignore[arg-type]

    def close(self) -> None:
        """Release every tracked handle, most recent first."""
        self._resources.close()

    def __enter__(self) -> RunContext:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
