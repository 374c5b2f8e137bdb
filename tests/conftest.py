"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest

from siteprep.adapters.mock import MockDirectory
from siteprep.core.context import RunContext
from siteprep.core.models.site import SiteConfig

ROOT_DN = "DC=example,DC=com"


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def site_yml(tmp_path: Path) -> Path:
    """Write a complete siteprep.yml to a temp directory."""
    content = textwrap.dedent("""\
        version: 1
        site:
          server_name: SITE01
          domain: EXAMPLE
        prerequisites:
          downloader: 'D:\\SMSSETUP\\BIN\\X64\\setupdl.exe'
          target_dir: 'C:\\Prereqs'
        features:
          required:
            - NET-Framework-Features
            - BITS
            - Web-Server
          recommended:
            - RSAT-AD-PowerShell
        adk:
          installer: 'C:\\Media\\adksetup.exe'
          addon_installer: 'C:\\Media\\adkwinpesetup.exe'
        wsus:
          content_dir: 'D:\\WSUS'
          sql_instance: 'SITE01\\CM'
        sql:
          media_path: 'D:\\SQL'
          instance_name: cm
          sysadmin_accounts:
            - 'EXAMPLE\\SQL Admins'
          min_memory_mb: 4096
          max_memory_mb: 8192
        directory:
          server: dc01.example.com
        poll_interval: 5
    """)
    path = tmp_path / "siteprep.yml"
    path.write_text(content)
    return path


@pytest.fixture
def config() -> SiteConfig:
    """A config built in memory, equivalent to ``site_yml``."""
    return SiteConfig.model_validate({
        "site": {"server_name": "SITE01", "domain": "EXAMPLE"},
        "prerequisites": {
            "downloader": r"D:\SMSSETUP\BIN\X64\setupdl.exe",
            "target_dir": r"C:\Prereqs",
        },
        "features": {
            "required": ["NET-Framework-Features", "BITS", "Web-Server"],
            "recommended": ["RSAT-AD-PowerShell"],
        },
        "adk": {
            "installer": r"C:\Media\adksetup.exe",
            "addon_installer": r"C:\Media\adkwinpesetup.exe",
        },
        "wsus": {"content_dir": r"D:\WSUS", "sql_instance": r"SITE01\CM"},
        "sql": {
            "media_path": r"D:\SQL",
            "instance_name": "cm",
            "sysadmin_accounts": [r"EXAMPLE\SQL Admins"],
            "min_memory_mb": 4096,
            "max_memory_mb": 8192,
        },
        "poll_interval": 5,
    })


@pytest.fixture
def sleeps() -> list[float]:
    """Records sleep intervals instead of sleeping."""
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]):
    return sleeps.append


@pytest.fixture
def directory() -> MockDirectory:
    """Directory tree holding just the domain root and CN=System."""
    d = MockDirectory(ROOT_DN, auto_principals=True)
    d.add_object(ROOT_DN, "container", "System")
    return d


@pytest.fixture
def ctx() -> RunContext:
    return RunContext("test")
