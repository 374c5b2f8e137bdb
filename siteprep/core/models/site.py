"""
Site model — the typed option set loaded from siteprep.yml.

Every recognised field is declared here; unknown keys are rejected
(``extra="forbid"``), so a typo in the YAML fails loudly at load time
instead of being silently ignored by the step that needed it.
"""

from __future__ import annotations

import os
import re
from pathlib import PureWindowsPath

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from siteprep.core.data import defaults
from siteprep.core.models.version import Version

_INSTANCE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,15}$")


class _Options(BaseModel):
    model_config = ConfigDict(extra="forbid")


class SiteOptions(_Options):
    """Identity of the site server being prepared."""

    server_name: str = ""
    domain: str = ""        # NetBIOS domain name, e.g. CONTOSO

    @property
    def computer_account(self) -> str:
        """``DOMAIN\\SERVER$`` (or ``SERVER$`` when no domain is set)."""
        if not self.server_name:
            return ""
        account = f"{self.server_name}$"
        return f"{self.domain}\\{account}" if self.domain else account


class PrerequisiteOptions(_Options):
    """Setup downloader invocation."""

    downloader: str = ""    # path to setupdl.exe on the install media
    target_dir: str = ""

    @property
    def image_name(self) -> str:
        return PureWindowsPath(self.downloader).name if self.downloader else ""


class FeatureOptions(_Options):
    """Which Windows features must (or should) be present."""

    required: list[str] = Field(default_factory=lambda: list(defaults.REQUIRED_FEATURES))
    recommended: list[str] = Field(default_factory=lambda: list(defaults.RECOMMENDED_FEATURES))
    source: str | None = None           # -Source for side-by-side payloads
    tolerate_missing_catalog: bool = False

    @field_validator("required", "recommended")
    @classmethod
    def _no_blank_names(cls, value: list[str]) -> list[str]:
        cleaned = [v.strip() for v in value]
        if any(not v for v in cleaned):
            raise ValueError("feature names must not be blank")
        return cleaned


class AdkOptions(_Options):
    """Deployment kit and its WinPE add-on."""

    installer: str = ""                 # adksetup.exe
    addon_installer: str = ""           # adkwinpesetup.exe
    features: list[str] = Field(default_factory=lambda: list(defaults.ADK_FEATURES))
    addon_features: list[str] = Field(default_factory=lambda: list(defaults.ADK_ADDON_FEATURES))
    addon_threshold: str = defaults.ADK_ADDON_THRESHOLD
    install_path: str = defaults.ADK_INSTALL_PATH

    @field_validator("addon_threshold")
    @classmethod
    def _valid_threshold(cls, value: str) -> str:
        Version.parse(value)
        return value

    @property
    def threshold(self) -> Version:
        return Version.parse(self.addon_threshold)

    @property
    def deployment_tools_dir(self) -> str:
        return str(PureWindowsPath(self.install_path) / defaults.ADK_DEPLOYMENT_TOOLS_DIR)

    @property
    def winpe_dir(self) -> str:
        return str(PureWindowsPath(self.install_path) / defaults.ADK_WINPE_DIR)


class WsusOptions(_Options):
    """Software-update role and its post-install step."""

    content_dir: str = r"C:\WSUS"
    sql_instance: str = ""              # empty → Windows Internal Database
    wsusutil: str = defaults.WSUSUTIL_PATH

    @property
    def features(self) -> list[str]:
        db = defaults.WSUS_SQL_FEATURE if self.sql_instance else defaults.WSUS_WID_FEATURE
        return [*defaults.WSUS_BASE_FEATURES, db]


class SqlInstanceOptions(_Options):
    """Declarative SQL Server instance definition.

    Rendered into a ``ConfigurationFile.ini`` for unattended setup.
    """

    media_path: str = ""                # directory holding setup.exe
    instance_name: str = defaults.SQL_DEFAULT_INSTANCE
    features: list[str] = Field(default_factory=lambda: ["SQLENGINE"])
    collation: str = defaults.SQL_COLLATION
    sysadmin_accounts: list[str] = Field(default_factory=list)
    service_account: str = ""           # empty → virtual account
    agent_service_account: str = ""
    install_dir: str = ""
    data_dir: str = ""
    log_dir: str = ""
    backup_dir: str = ""
    tempdb_dir: str = ""
    tcp_port: int = Field(default=1433, ge=1, le=65535)
    min_memory_mb: int = Field(default=0, ge=0)
    max_memory_mb: int | None = Field(default=None, ge=128)
    update_enabled: bool = False

    @field_validator("instance_name")
    @classmethod
    def _valid_instance(cls, value: str) -> str:
        if not _INSTANCE_RE.match(value):
            raise ValueError(f"invalid SQL instance name: {value!r}")
        return value.upper()

    @field_validator("features")
    @classmethod
    def _upper_features(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one SQL feature is required")
        return [v.strip().upper() for v in value]

    @model_validator(mode="after")
    def _memory_range(self) -> SqlInstanceOptions:
        if self.max_memory_mb is not None and self.min_memory_mb > self.max_memory_mb:
            raise ValueError(
                f"min_memory_mb ({self.min_memory_mb}) exceeds max_memory_mb ({self.max_memory_mb})"
            )
        return self

    @property
    def is_default_instance(self) -> bool:
        return self.instance_name == defaults.SQL_DEFAULT_INSTANCE

    @property
    def service_name(self) -> str:
        """Windows service name of the database engine."""
        if self.is_default_instance:
            return defaults.SQL_DEFAULT_INSTANCE
        return f"MSSQL${self.instance_name}"

    @property
    def setup_path(self) -> str:
        return str(PureWindowsPath(self.media_path) / defaults.SQL_SETUP_IMAGE)


class CredentialOptions(_Options):
    """Alternate credential — names of the env vars holding it.

    Secrets never live in siteprep.yml.
    """

    username_env: str = "SITEPREP_AD_USER"
    password_env: str = "SITEPREP_AD_PASSWORD"

    def resolve(self) -> tuple[str, str]:
        """Return ``(username, password)`` from the environment ('' if unset)."""
        return os.environ.get(self.username_env, ""), os.environ.get(self.password_env, "")


class DirectoryOptions(_Options):
    """Container provisioning in Active Directory."""

    container_name: str = defaults.CONTAINER_NAME
    container_class: str = defaults.CONTAINER_CLASS
    parent: str = defaults.CONTAINER_PARENT     # RDN(s) below the domain root
    principal: str = ""                         # default: site computer account
    server: str | None = None
    credential: CredentialOptions | None = None

    @field_validator("container_name")
    @classmethod
    def _non_empty_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("container_name must not be blank")
        return value.strip()


class SiteConfig(_Options):
    """Root option set — loaded from siteprep.yml."""

    version: int = 1

    site: SiteOptions = Field(default_factory=SiteOptions)
    prerequisites: PrerequisiteOptions = Field(default_factory=PrerequisiteOptions)
    features: FeatureOptions = Field(default_factory=FeatureOptions)
    adk: AdkOptions = Field(default_factory=AdkOptions)
    wsus: WsusOptions = Field(default_factory=WsusOptions)
    sql: SqlInstanceOptions = Field(default_factory=SqlInstanceOptions)
    directory: DirectoryOptions = Field(default_factory=DirectoryOptions)

    poll_interval: float = Field(default=defaults.POLL_INTERVAL_SECONDS, gt=0)

    def directory_principal(self) -> str:
        """Account to grant on the container (explicit, else the site server)."""
        return self.directory.principal or self.site.computer_account
