"""
L0 Data — compiled-in defaults.

Feature sets and constants used when ``siteprep.yml`` leaves a field
out. Pure data: no I/O.
"""

from __future__ import annotations

# Windows Server roles/features a primary site server needs.
# Order matters: it is the order handed to Install-WindowsFeature.
REQUIRED_FEATURES: tuple[str, ...] = (
    "NET-Framework-Features",
    "NET-Framework-Core",
    "NET-Framework-45-ASPNET",
    "BITS",
    "BITS-IIS-Ext",
    "RDC",
    "WAS-Process-Model",
    "WAS-Config-APIs",
    "Web-Server",
    "Web-Common-Http",
    "Web-Default-Doc",
    "Web-Static-Content",
    "Web-ISAPI-Ext",
    "Web-ISAPI-Filter",
    "Web-Net-Ext45",
    "Web-ASP-Net45",
    "Web-Windows-Auth",
    "Web-Basic-Auth",
    "Web-Stat-Compression",
    "Web-Metabase",
    "Web-WMI",
    "Web-Mgmt-Console",
)

# Nice to have; missing ones only produce a warning.
RECOMMENDED_FEATURES: tuple[str, ...] = (
    "RSAT-AD-PowerShell",
    "Web-HTTP-Redirect",
)

# ── Deployment kit ──────────────────────────────────────────────

ADK_FEATURES: tuple[str, ...] = (
    "OptionId.DeploymentTools",
    "OptionId.UserStateMigrationTool",
)
ADK_ADDON_FEATURES: tuple[str, ...] = ("OptionId.WindowsPreinstallationEnvironment",)

# From 1809 (10.1.17763.1) WinPE ships as a separate add-on.
ADK_ADDON_THRESHOLD = "10.1.17763.1"

ADK_INSTALL_PATH = r"C:\Program Files (x86)\Windows Kits\10"
ADK_DEPLOYMENT_TOOLS_DIR = r"Assessment and Deployment Kit\Deployment Tools"
ADK_WINPE_DIR = r"Assessment and Deployment Kit\Windows Preinstallation Environment"

# ── WSUS ────────────────────────────────────────────────────────

WSUS_BASE_FEATURES: tuple[str, ...] = ("UpdateServices-Services", "UpdateServices-RSAT")
WSUS_SQL_FEATURE = "UpdateServices-DB"
WSUS_WID_FEATURE = "UpdateServices-WidDB"
WSUSUTIL_PATH = r"C:\Program Files\Update Services\Tools\WsusUtil.exe"

# ── SQL Server ──────────────────────────────────────────────────

SQL_DEFAULT_INSTANCE = "MSSQLSERVER"
SQL_COLLATION = "SQL_Latin1_General_CP1_CI_AS"
SQL_SETUP_IMAGE = "setup.exe"

# ── Directory ───────────────────────────────────────────────────

CONTAINER_NAME = "System Management"
CONTAINER_CLASS = "container"
CONTAINER_PARENT = "CN=System"

# ── Polling ─────────────────────────────────────────────────────

POLL_INTERVAL_SECONDS = 10.0
