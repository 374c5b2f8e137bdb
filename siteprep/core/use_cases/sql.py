"""
SQL Server use case — provision an instance from a declarative option set.

The ``sql`` section of siteprep.yml is rendered into an unattended
``ConfigurationFile.ini`` and handed to the media's ``setup.exe``.
An instance whose engine service already exists is left alone.
"""

from __future__ import annotations

import logging
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from siteprep.adapters.registry import HostRegistry
from siteprep.adapters.shell.command import ps_quote, run_powershell
from siteprep.core.context import RunContext
from siteprep.core.data import defaults
from siteprep.core.errors import CommandFailed, ConfigError, ConfigurationMissing, CreationFailed
from siteprep.core.models.site import SiteConfig, SqlInstanceOptions
from siteprep.core.services.prereqs import launch_and_wait

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "siteprep-sql-ConfigurationFile.ini"


@dataclass
class SqlResult:
    instance_name: str = ""
    service_name: str = ""
    already_installed: bool = False
    config_file: str = ""
    installed: bool = False
    tcp_port: int | None = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "instance_name": self.instance_name,
            "service_name": self.service_name,
            "already_installed": self.already_installed,
            "config_file": self.config_file,
            "installed": self.installed,
            "tcp_port": self.tcp_port,
            "warnings": self.warnings,
        }


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def render_configuration_file(options: SqlInstanceOptions) -> str:
    """Render the unattended-setup INI for ``options``."""
    lines = [
        "; Generated by siteprep",
        "[OPTIONS]",
        'ACTION="Install"',
        'QUIETSIMPLE="True"',
        f"FEATURES={','.join(options.features)}",
        f"INSTANCENAME={_quote(options.instance_name)}",
        f"INSTANCEID={_quote(options.instance_name)}",
        f"SQLCOLLATION={_quote(options.collation)}",
        f"SQLSYSADMINACCOUNTS={' '.join(_quote(a) for a in options.sysadmin_accounts)}",
        'SQLSVCSTARTUPTYPE="Automatic"',
        'AGTSVCSTARTUPTYPE="Automatic"',
        'TCPENABLED="1"',
        f"UPDATEENABLED={_quote(str(options.update_enabled))}",
    ]

    optional = (
        ("SQLSVCACCOUNT", options.service_account),
        ("AGTSVCACCOUNT", options.agent_service_account),
        ("INSTANCEDIR", options.install_dir),
        ("SQLUSERDBDIR", options.data_dir),
        ("SQLUSERDBLOGDIR", options.log_dir),
        ("SQLBACKUPDIR", options.backup_dir),
        ("SQLTEMPDBDIR", options.tempdb_dir),
    )
    for key, value in optional:
        if value:
            lines.append(f"{key}={_quote(value)}")

    if options.min_memory_mb:
        lines.append(f"SQLMINMEMORY={options.min_memory_mb}")
    if options.max_memory_mb is not None:
        lines.append(f"SQLMAXMEMORY={options.max_memory_mb}")

    return "\n".join(lines) + "\n"


def _tcp_port_script(options: SqlInstanceOptions) -> str:
    """PowerShell that pins the instance to a static TCP port and restarts it."""
    return (
        "$id = (Get-ItemProperty 'HKLM:\\SOFTWARE\\Microsoft\\Microsoft SQL Server\\Instance Names\\SQL')."
        f"{options.instance_name}; "
        "$key = \"HKLM:\\SOFTWARE\\Microsoft\\Microsoft SQL Server\\$id\\MSSQLServer\\SuperSocketNetLib\\Tcp\\IPAll\"; "
        f"Set-ItemProperty -Path $key -Name TcpPort -Value {ps_quote(str(options.tcp_port))}; "
        "Set-ItemProperty -Path $key -Name TcpDynamicPorts -Value ''; "
        f"Restart-Service -Name {ps_quote(options.service_name)} -Force"
    )


def install_sql(
    config: SiteConfig,
    host: HostRegistry,
    *,
    config_dir: Path | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SqlResult:
    """Install the configured SQL Server instance unless it exists.

    Raises:
        ConfigError: No sysadmin accounts configured.
        ConfigurationMissing: Media path not configured or setup.exe absent.
        CreationFailed: Setup finished but the engine service does not exist.
        CommandFailed: Static TCP port configuration failed.
    """
    options = config.sql
    result = SqlResult(instance_name=options.instance_name, service_name=options.service_name)

    with RunContext("sql-install") as ctx:
        if host.services.exists(options.service_name):
            logger.info("SQL Server instance %s already installed", options.instance_name)
            result.already_installed = True
            ctx.warn(
                f"Instance {options.instance_name} already exists; its configuration was not changed"
            )
            result.warnings = list(ctx.warnings)
            return result

        if not options.media_path:
            raise ConfigurationMissing("sql.media_path is not configured", target="sql.media_path")
        if not host.files.exists(options.setup_path):
            raise ConfigurationMissing("SQL Server setup.exe not found", target=options.setup_path)
        if "SQLENGINE" in options.features and not options.sysadmin_accounts:
            raise ConfigError(
                "sql.sysadmin_accounts must name at least one account for SQLENGINE",
                target="sql.sysadmin_accounts",
            )

        directory = config_dir or Path(tempfile.gettempdir())
        ini_path = str(directory / CONFIG_FILE_NAME)
        host.files.write_text(ini_path, render_configuration_file(options))
        result.config_file = ini_path

        launch_and_wait(
            host.launcher,
            host.processes,
            options.setup_path,
            [f"/ConfigurationFile={ini_path}", "/IACCEPTSQLSERVERLICENSETERMS"],
            image_name=defaults.SQL_SETUP_IMAGE,
            interval=config.poll_interval,
            sleep=sleep,
        )

        if not host.services.exists(options.service_name):
            raise CreationFailed(
                "SQL Server setup finished but the engine service is missing",
                target=options.service_name,
                expected="service installed",
                observed="service not found; see the setup Summary.txt log",
            )
        result.installed = True

        ps = run_powershell(host.runner, _tcp_port_script(options))
        if not ps.ok:
            raise CommandFailed(
                "Setting the static TCP port failed",
                target=options.service_name,
                expected=f"TcpPort={options.tcp_port}",
                observed=ps.error_text[:300],
            )
        result.tcp_port = options.tcp_port

    result.warnings = list(ctx.warnings)
    return result
