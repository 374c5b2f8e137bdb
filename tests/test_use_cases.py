"""
Tests for use cases — each step run end to end against mock host adapters.
"""

from pathlib import Path

import pytest

from siteprep.adapters.mock import (
    MockDirectory,
    MockFeatureInventory,
    MockFileSystem,
    MockLauncher,
    MockProcessTable,
    MockRunner,
    MockServiceProbe,
)
from siteprep.adapters.registry import HostRegistry
from siteprep.core.errors import (
    CommandFailed,
    ConfigError,
    ConfigurationMissing,
    CreationFailed,
    LookupFailed,
    VersionIncompatible,
)
from siteprep.core.models.feature import FeatureInstallResult
from siteprep.core.models.site import SiteConfig, SqlInstanceOptions
from siteprep.core.use_cases.adk import install_adk
from siteprep.core.use_cases.directory import provision_directory
from siteprep.core.use_cases.features import check_features, install_features
from siteprep.core.use_cases.prerequisites import download_prerequisites
from siteprep.core.use_cases.sql import CONFIG_FILE_NAME, install_sql, render_configuration_file
from siteprep.core.use_cases.wsus import install_wsus, postinstall_command

DOWNLOADER = r"D:\SMSSETUP\BIN\X64\setupdl.exe"
ADK = r"C:\Media\adksetup.exe"
ADDON = r"C:\Media\adkwinpesetup.exe"
WSUSUTIL = r"C:\Program Files\Update Services\Tools\WsusUtil.exe"
SQL_SETUP = r"D:\SQL\setup.exe"


def _host(**overrides) -> HostRegistry:
    return HostRegistry(mock_mode=True, **overrides)


class _FailingInventory(MockFeatureInventory):
    def install(self, names, *, source=None):
        super().install(names, source=source)
        return FeatureInstallResult(requested=list(names), success=False, exit_code="Failed")


class _InstallingLauncher(MockLauncher):
    """Launcher whose 'installer' registers a service as it runs."""

    def __init__(self, services: MockServiceProbe, service_name: str) -> None:
        super().__init__()
        self._services = services
        self._service_name = service_name

    def launch(self, executable, args):
        super().launch(executable, args)
        self._services.services.add(self._service_name.lower())


# ── Features ─────────────────────────────────────────────────────────


class TestFeatures:
    def test_check_reports_without_installing(self, config):
        inventory = MockFeatureInventory(installed=["BITS"], absent=["Web-Server"])
        report = check_features(config, _host(features=inventory))

        assert report.missing == ["NET-Framework-Features", "Web-Server"]
        assert inventory.install_calls == []
        assert not report.satisfied
        assert report.missing_recommended == ["RSAT-AD-PowerShell"]
        assert any("RSAT-AD-PowerShell" in w for w in report.warnings)

    def test_install_missing_in_one_call(self, config):
        inventory = MockFeatureInventory(installed=["BITS", "RSAT-AD-PowerShell"])
        report = install_features(config, _host(features=inventory))

        assert inventory.install_calls == [["NET-Framework-Features", "Web-Server"]]
        assert inventory.catalog_calls == 1
        assert report.installed == ["NET-Framework-Features", "Web-Server"]
        assert report.satisfied
        assert report.warnings == []

    def test_nothing_missing(self, config):
        inventory = MockFeatureInventory(
            installed=["NET-Framework-Features", "BITS", "Web-Server", "RSAT-AD-PowerShell"]
        )
        report = install_features(config, _host(features=inventory))
        assert inventory.install_calls == []
        assert report.missing == []

    def test_restart_pending_warns(self, config):
        inventory = MockFeatureInventory(installed=["RSAT-AD-PowerShell"], restart_needed=True)
        report = install_features(config, _host(features=inventory))
        assert report.restart_needed
        assert any("restart" in w.lower() for w in report.warnings)

    def test_catalog_missing_is_fatal_by_default(self, config):
        inventory = MockFeatureInventory(available=False)
        with pytest.raises(ConfigurationMissing):
            install_features(config, _host(features=inventory))
        assert inventory.install_calls == []

    def test_catalog_missing_tolerated(self, config):
        config.features.tolerate_missing_catalog = True
        inventory = MockFeatureInventory(available=False)
        report = check_features(config, _host(features=inventory))
        assert report.catalog_missing
        assert report.missing == config.features.required
        assert any("catalog" in w.lower() for w in report.warnings)

    def test_install_failure(self, config):
        with pytest.raises(CommandFailed):
            install_features(config, _host(features=_FailingInventory()))

    def test_to_dict(self, config):
        report = check_features(config, _host(features=MockFeatureInventory()))
        d = report.to_dict()
        assert d["missing"] == config.features.required
        assert d["satisfied"] is False


# ── Prerequisite download ────────────────────────────────────────────


class TestDownloadPrerequisites:
    def test_runs_downloader_and_waits(self, config, sleeps, fake_sleep):
        table = MockProcessTable()
        launcher = MockLauncher(table, alive_checks=2)
        files = MockFileSystem(files=[DOWNLOADER])
        host = _host(files=files, processes=table, launcher=launcher)

        result = download_prerequisites(config, host, sleep=fake_sleep)

        assert launcher.launches == [(DOWNLOADER, ["/NoUI", r"C:\Prereqs"])]
        assert result.checks == 3
        assert sleeps == [5, 5]
        assert table.checks == ["setupdl.exe"] * 3
        assert r"C:\Prereqs" in files.dirs
        assert any("empty" in w for w in result.warnings)

    def test_skips_populated_target(self, config, fake_sleep):
        launcher = MockLauncher()
        files = MockFileSystem(files=[DOWNLOADER], populated_dirs=[r"C:\Prereqs"])
        result = download_prerequisites(config, _host(files=files, launcher=launcher), sleep=fake_sleep)
        assert result.skipped
        assert launcher.launches == []

    def test_force_redownloads(self, config, fake_sleep):
        launcher = MockLauncher()
        files = MockFileSystem(files=[DOWNLOADER], populated_dirs=[r"C:\Prereqs"])
        result = download_prerequisites(
            config, _host(files=files, launcher=launcher), force=True, sleep=fake_sleep
        )
        assert not result.skipped
        assert len(launcher.launches) == 1
        assert result.warnings == []

    def test_downloader_missing(self, config, fake_sleep):
        with pytest.raises(ConfigurationMissing):
            download_prerequisites(config, _host(), sleep=fake_sleep)

    def test_not_configured(self, fake_sleep):
        with pytest.raises(ConfigurationMissing, match="downloader"):
            download_prerequisites(SiteConfig(), _host(), sleep=fake_sleep)


# ── Deployment kit ───────────────────────────────────────────────────


class TestInstallAdk:
    def _files(self, version: str, *extra: str) -> MockFileSystem:
        return MockFileSystem(files=[ADK, ADDON, *extra], versions={ADK: version})

    def test_addon_required(self, config, fake_sleep):
        launcher = MockLauncher()
        host = _host(files=self._files("10.1.22621.1"), launcher=launcher)

        result = install_adk(config, host, sleep=fake_sleep)

        assert result.addon_required
        assert result.kit_installed
        assert result.addon_installed
        assert launcher.launches == [
            (ADK, ["/quiet", "/norestart", "/ceip", "off", "/features", "OptionId.DeploymentTools", "OptionId.UserStateMigrationTool"]),
            (ADDON, ["/quiet", "/norestart", "/ceip", "off", "/features", "OptionId.WindowsPreinstallationEnvironment"]),
        ]
        assert any("add-on" in w for w in result.warnings)

    def test_addon_at_threshold(self, config, fake_sleep):
        host = _host(files=self._files("10.1.17763.1"), launcher=MockLauncher())
        assert install_adk(config, host, sleep=fake_sleep).addon_required

    def test_older_kit_includes_winpe(self, config, fake_sleep):
        launcher = MockLauncher()
        host = _host(files=self._files("10.1.17134.1"), launcher=launcher)

        result = install_adk(config, host, sleep=fake_sleep)

        assert not result.addon_required
        assert not result.addon_installed
        assert len(launcher.launches) == 1
        exe, args = launcher.launches[0]
        assert exe == ADK
        assert args[-1] == config.adk.addon_features[0]
        assert result.warnings == []

    def test_addon_installer_missing(self, config, fake_sleep):
        launcher = MockLauncher()
        files = MockFileSystem(files=[ADK], versions={ADK: "10.1.22621.1"})
        with pytest.raises(VersionIncompatible):
            install_adk(config, _host(files=files, launcher=launcher), sleep=fake_sleep)
        assert launcher.launches == []

    def test_addon_installer_not_configured(self, config, fake_sleep):
        config.adk.addon_installer = ""
        files = MockFileSystem(files=[ADK], versions={ADK: "10.1.22621.1"})
        with pytest.raises(VersionIncompatible):
            install_adk(config, _host(files=files), sleep=fake_sleep)

    def test_kit_already_installed(self, config, fake_sleep):
        launcher = MockLauncher()
        files = self._files("10.1.22621.1", config.adk.deployment_tools_dir)
        result = install_adk(config, _host(files=files, launcher=launcher), sleep=fake_sleep)

        assert not result.kit_installed
        assert result.addon_installed
        assert [exe for exe, _ in launcher.launches] == [ADDON]

    def test_everything_present(self, config, fake_sleep):
        launcher = MockLauncher()
        files = self._files("10.1.22621.1", config.adk.deployment_tools_dir, config.adk.winpe_dir)
        result = install_adk(config, _host(files=files, launcher=launcher), sleep=fake_sleep)
        assert launcher.launches == []
        assert result.addon_required

    def test_winpe_present_needs_no_addon_installer(self, config, fake_sleep):
        config.adk.addon_installer = ""
        launcher = MockLauncher()
        files = MockFileSystem(
            files=[ADK, config.adk.deployment_tools_dir, config.adk.winpe_dir],
            versions={ADK: "10.1.22621.1"},
        )
        result = install_adk(config, _host(files=files, launcher=launcher), sleep=fake_sleep)

        assert result.addon_required
        assert not result.addon_installed
        assert launcher.launches == []
        assert any("add-on" in w for w in result.warnings)

    def test_winpe_present_kit_missing(self, config, fake_sleep):
        launcher = MockLauncher()
        files = MockFileSystem(files=[ADK, config.adk.winpe_dir], versions={ADK: "10.1.22621.1"})
        result = install_adk(config, _host(files=files, launcher=launcher), sleep=fake_sleep)

        assert result.kit_installed
        assert not result.addon_installed
        assert [exe for exe, _ in launcher.launches] == [ADK]

    def test_installer_missing(self, config, fake_sleep):
        with pytest.raises(ConfigurationMissing):
            install_adk(config, _host(), sleep=fake_sleep)


# ── WSUS ─────────────────────────────────────────────────────────────


class TestInstallWsus:
    def test_installs_role_and_runs_postinstall(self, config):
        inventory = MockFeatureInventory()
        runner = MockRunner()
        files = MockFileSystem(files=[WSUSUTIL])
        result = install_wsus(config, _host(features=inventory, runner=runner, files=files))

        assert inventory.install_calls == [
            ["UpdateServices-Services", "UpdateServices-RSAT", "UpdateServices-DB"]
        ]
        command, _ = runner.call_log[-1]
        assert command == [WSUSUTIL, "postinstall", r"CONTENT_DIR=D:\WSUS", r"SQL_INSTANCE_NAME=SITE01\CM"]
        assert r"D:\WSUS" in files.dirs
        assert result.to_dict()["postinstall_command"] == command

    def test_wid_without_sql_instance(self):
        config = SiteConfig.model_validate({"wsus": {"content_dir": r"E:\WSUS"}})
        assert postinstall_command(config)[2:] == [r"CONTENT_DIR=E:\WSUS"]
        assert config.wsus.features[-1] == "UpdateServices-WidDB"

    def test_wsusutil_missing(self, config):
        runner = MockRunner()
        with pytest.raises(ConfigurationMissing):
            install_wsus(config, _host(runner=runner))
        assert runner.call_count == 0

    def test_postinstall_failure(self, config):
        runner = MockRunner()
        runner.set_response("postinstall", returncode=1, stderr="Fatal Error: database unreachable")
        files = MockFileSystem(files=[WSUSUTIL])
        with pytest.raises(CommandFailed) as exc:
            install_wsus(config, _host(runner=runner, files=files))
        assert "database unreachable" in exc.value.observed


# ── SQL Server ───────────────────────────────────────────────────────


class TestRenderConfigurationFile:
    def test_core_keys(self, config):
        ini = render_configuration_file(config.sql)
        lines = ini.splitlines()
        assert "[OPTIONS]" in lines
        assert 'ACTION="Install"' in lines
        assert "FEATURES=SQLENGINE" in lines
        assert 'INSTANCENAME="CM"' in lines
        assert 'SQLSYSADMINACCOUNTS="EXAMPLE\\SQL Admins"' in lines
        assert 'TCPENABLED="1"' in lines
        assert "SQLMINMEMORY=4096" in lines
        assert "SQLMAXMEMORY=8192" in lines
        assert not any(line.startswith("SQLSVCACCOUNT") for line in lines)

    def test_optional_keys(self):
        options = SqlInstanceOptions(
            features=["sqlengine", "fulltext"],
            sysadmin_accounts=["EXAMPLE\\a", "EXAMPLE\\b"],
            service_account="EXAMPLE\\svc-sql",
            data_dir="E:\\Data",
        )
        lines = render_configuration_file(options).splitlines()
        assert "FEATURES=SQLENGINE,FULLTEXT" in lines
        assert 'SQLSYSADMINACCOUNTS="EXAMPLE\\a" "EXAMPLE\\b"' in lines
        assert 'SQLSVCACCOUNT="EXAMPLE\\svc-sql"' in lines
        assert 'SQLUSERDBDIR="E:\\Data"' in lines
        assert not any(line.startswith("SQLMAXMEMORY") for line in lines)


class TestInstallSql:
    def test_already_installed_is_noop(self, config, tmp_path: Path, fake_sleep):
        launcher = MockLauncher()
        services = MockServiceProbe(["MSSQL$CM"])
        result = install_sql(
            config, _host(services=services, launcher=launcher), config_dir=tmp_path, sleep=fake_sleep
        )
        assert result.already_installed
        assert launcher.launches == []
        assert result.warnings

    def test_fresh_install(self, config, tmp_path: Path, fake_sleep):
        services = MockServiceProbe()
        launcher = _InstallingLauncher(services, "MSSQL$CM")
        files = MockFileSystem(files=[SQL_SETUP])
        runner = MockRunner()

        result = install_sql(
            config,
            _host(services=services, launcher=launcher, files=files, runner=runner),
            config_dir=tmp_path,
            sleep=fake_sleep,
        )

        ini_path = str(tmp_path / CONFIG_FILE_NAME)
        assert result.installed
        assert result.config_file == ini_path
        assert 'INSTANCENAME="CM"' in files.written[ini_path]
        assert launcher.launches == [
            (SQL_SETUP, [f"/ConfigurationFile={ini_path}", "/IACCEPTSQLSERVERLICENSETERMS"])
        ]
        assert "TcpPort" in runner.last_command()
        assert result.tcp_port == 1433

    def test_service_missing_after_setup(self, config, tmp_path: Path, fake_sleep):
        files = MockFileSystem(files=[SQL_SETUP])
        with pytest.raises(CreationFailed):
            install_sql(config, _host(files=files), config_dir=tmp_path, sleep=fake_sleep)

    def test_setup_missing(self, config, tmp_path: Path, fake_sleep):
        with pytest.raises(ConfigurationMissing):
            install_sql(config, _host(), config_dir=tmp_path, sleep=fake_sleep)

    def test_no_sysadmins(self, config, tmp_path: Path, fake_sleep):
        config.sql.sysadmin_accounts = []
        files = MockFileSystem(files=[SQL_SETUP])
        with pytest.raises(ConfigError):
            install_sql(config, _host(files=files), config_dir=tmp_path, sleep=fake_sleep)
        assert files.written == {}

    def test_tcp_port_failure(self, config, tmp_path: Path, fake_sleep):
        services = MockServiceProbe()
        runner = MockRunner()
        runner.set_response("TcpPort", returncode=1, stderr="Cannot find path")
        host = _host(
            services=services,
            launcher=_InstallingLauncher(services, "MSSQL$CM"),
            files=MockFileSystem(files=[SQL_SETUP]),
            runner=runner,
        )
        with pytest.raises(CommandFailed):
            install_sql(config, host, config_dir=tmp_path, sleep=fake_sleep)


# ── Directory ────────────────────────────────────────────────────────


class TestProvisionDirectory:
    def test_grants_site_computer_account(self, config, directory):
        result = provision_directory(config, _host(directory=directory))

        assert result.identity == "EXAMPLE\\SITE01$"
        assert result.provision.created
        assert result.provision.permission_added
        assert directory.closed
        d = result.to_dict()
        assert d["container"] == "CN=System Management,CN=System,DC=example,DC=com"
        assert d["identity"] == "EXAMPLE\\SITE01$"

    def test_second_run_already_present(self, config, directory):
        provision_directory(config, _host(directory=directory))
        writes = directory.write_count
        result = provision_directory(config, _host(directory=directory))
        assert directory.write_count == writes
        assert result.provision.already_present
        assert result.warnings

    def test_no_identity(self, directory):
        with pytest.raises(ConfigurationMissing):
            provision_directory(SiteConfig(), _host(directory=directory))
        assert directory.reads == []

    def test_session_closed_on_failure(self, config):
        directory = MockDirectory(None, auto_principals=True)
        with pytest.raises(LookupFailed):
            provision_directory(config, _host(directory=directory))
        assert directory.closed
