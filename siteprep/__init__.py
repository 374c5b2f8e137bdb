"""siteprep — site server prerequisite automation."""

__version__ = "0.1.0"
