"""
Configuration loader — reads siteprep.yml into the typed option set.

This is the primary entry point for loading configuration. It reads
YAML, validates it against the Pydantic models in
``siteprep.core.models.site`` and returns a ``SiteConfig``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from siteprep.core.errors import ConfigError, ConfigurationMissing
from siteprep.core.models.site import SiteConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "siteprep.yml"


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for siteprep.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to siteprep.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> SiteConfig:
    """Load and validate siteprep.yml.

    Args:
        path: Explicit path to the config file. If None, searches upward.

    Returns:
        Validated SiteConfig.

    Raises:
        ConfigurationMissing: The file cannot be found or read.
        ConfigError: The file is not UTF-8, not valid YAML, or fails
            validation.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigurationMissing(
            f"No {CONFIG_FILE} found. Create one or pass --config.",
            target=CONFIG_FILE,
        )

    if not path.is_file():
        raise ConfigurationMissing("Config file not found", target=str(path))

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationMissing(f"Cannot read {path}: {e}", target=str(path)) from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"{path} is not valid UTF-8: {e}", target=str(path)) from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}", target=str(path)) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected a YAML mapping in {path}, got {type(data).__name__}",
            target=str(path),
        )

    try:
        config = SiteConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}", target=str(path)) from e

    logger.info("Loaded config from %s (site server: %s)", path, config.site.server_name or "-")
    return config
