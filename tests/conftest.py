"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from devsetup.core.context import set_dry_run
from devsetup.core.models.target import PlatformDescriptor


@pytest.fixture(autouse=True)
def _reset_dry_run():
    """Dry-run is process-wide; never leak it between tests."""
    set_dry_run(False)
    yield
    set_dry_run(False)


@pytest.fixture
def fake_home(tmp_path: Path, monkeypatch) -> Path:
    """Point HOME at a temp directory so ``~`` never touches the real one."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("DEVSETUP_CONFIG", raising=False)
    return home


@pytest.fixture
def apt_platform() -> PlatformDescriptor:
    return PlatformDescriptor(package_manager="apt", os_name="linux", arch="x86_64")


@pytest.fixture
def dnf_platform() -> PlatformDescriptor:
    return PlatformDescriptor(package_manager="dnf", os_name="linux", arch="x86_64")


@pytest.fixture
def ok_run() -> dict:
    """A successful ``run_command`` result."""
    return {"ok": True, "stdout": "", "elapsed_ms": 1}
