"""Adapters — host bindings (Windows tools and in-memory doubles).

Public re-exports for convenient access.
"""

from siteprep.adapters.registry import HostRegistry

__all__ = ["HostRegistry"]
