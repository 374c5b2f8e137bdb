"""
Config check use case — validate siteprep.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from siteprep.core.config.loader import CONFIG_FILE, find_config_file, load_config
from siteprep.core.errors import ConfigError
from siteprep.core.models.site import SiteConfig


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: SiteConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "server_name": self.config.site.server_name if self.config else None,
            "required_feature_count": len(self.config.features.required) if self.config else 0,
            "sql_instance": self.config.sql.instance_name if self.config else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate site configuration and report issues.

    Args:
        config_path: Optional explicit path to siteprep.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()

    if config_path is None:
        result.errors.append(f"No {CONFIG_FILE} found.")
        return result

    result.config_path = config_path

    # Load and validate
    try:
        config = load_config(config_path)
        result.config = config
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    # Semantic checks
    if not config.site.server_name and not config.directory.principal:
        result.warnings.append(
            "Neither site.server_name nor directory.principal is set; "
            "'ad container' has no account to grant."
        )

    if not config.prerequisites.downloader:
        result.warnings.append("prerequisites.downloader is not set; 'prereqs download' will fail.")

    if not config.adk.installer:
        result.warnings.append("adk.installer is not set; 'adk install' will fail.")

    if not config.sql.media_path:
        result.warnings.append("sql.media_path is not set; 'sql install' will fail.")
    elif "SQLENGINE" in config.sql.features and not config.sql.sysadmin_accounts:
        result.errors.append("sql.sysadmin_accounts is empty; SQL setup requires at least one.")

    required = config.features.required
    dupes = {n for n in required if required.count(n) > 1}
    if dupes:
        result.warnings.append(f"Duplicate required features: {', '.join(sorted(dupes))}")

    overlap = set(required) & set(config.features.recommended)
    if overlap:
        result.warnings.append(
            f"Features listed as both required and recommended: {', '.join(sorted(overlap))}"
        )

    if config.directory.credential:
        user, password = config.directory.credential.resolve()
        if not user or not password:
            result.warnings.append(
                f"Credential env vars {config.directory.credential.username_env}/"
                f"{config.directory.credential.password_env} are not both set; "
                "the current session identity will be used."
            )

    result.valid = len(result.errors) == 0
    return result
