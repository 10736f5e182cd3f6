"""
Tests for configuration loading — devsetup.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from devsetup.core.config.loader import ConfigError, find_config_file, load_config
from devsetup.core.models.profile import ProvisionConfig


@pytest.fixture
def custom_yml(tmp_path: Path) -> Path:
    content = textwrap.dedent("""\
        npm_packages:
          - typescript
        pip_packages: []
        databases: ["redis"]
        docker: false
        network_timeout: 30
        runtimes:
          - tool: node
            channel: lts
        shell:
          theme: atomic
          upgrade: true
    """)
    path = tmp_path / "devsetup.yml"
    path.write_text(content)
    return path


class TestDefaults:
    def test_builtin_catalog(self):
        config = ProvisionConfig()
        names = [t.name for t in config.essential_packages]
        assert "git" in names
        assert "build-tools" in names
        assert [b.binary for b in config.release_binaries] == ["lazygit", "lazydocker"]
        assert [r.selector for r in config.runtimes] == [
            "node@lts", "python@latest", "rust@stable", "go@latest",
        ]
        assert config.databases is None
        assert config.docker is None

    def test_database_catalog_numbers(self):
        catalog = ProvisionConfig().database_catalog()
        assert list(catalog) == ["1", "2", "3", "4"]
        assert catalog["2"].apt_only is True

    def test_container_engine(self):
        docker = ProvisionConfig().container_engine()
        assert docker.key == "docker"
        assert docker.apt_only is True


class TestFindConfigFile:
    def test_walks_up(self, tmp_path: Path, fake_home):
        (tmp_path / "devsetup.yml").write_text("{}")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == tmp_path / "devsetup.yml"

    def test_user_config_fallback(self, tmp_path: Path, fake_home: Path):
        user_dir = fake_home / ".config" / "devsetup"
        user_dir.mkdir(parents=True)
        (user_dir / "devsetup.yml").write_text("{}")
        workdir = tmp_path / "work"
        workdir.mkdir()
        assert find_config_file(workdir) == user_dir / "devsetup.yml"

    def test_nothing_found(self, tmp_path: Path, fake_home):
        workdir = tmp_path / "work"
        workdir.mkdir()
        assert find_config_file(workdir) is None


class TestLoadConfig:
    def test_explicit_file(self, custom_yml: Path):
        config = load_config(custom_yml)
        assert config.npm_packages == ["typescript"]
        assert config.pip_packages == []
        assert config.databases == ["redis"]
        assert config.docker is False
        assert config.network_timeout == 30
        assert config.shell.theme == "atomic"
        assert config.shell.upgrade is True

    def test_omitted_keys_keep_defaults(self, custom_yml: Path):
        config = load_config(custom_yml)
        assert len(config.essential_packages) == len(ProvisionConfig().essential_packages)
        assert "zsh-autosuggestions" in config.shell.plugins

    def test_empty_file_is_defaults(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("")
        assert load_config(path) == ProvisionConfig()

    def test_env_var(self, custom_yml: Path, fake_home, monkeypatch):
        monkeypatch.setenv("DEVSETUP_CONFIG", str(custom_yml))
        assert load_config().network_timeout == 30

    def test_no_file_anywhere(self, tmp_path: Path, fake_home, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config() == ProvisionConfig()

    def test_missing_explicit_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("npm_packages: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_schema_violation(self, tmp_path: Path):
        path = tmp_path / "devsetup.yml"
        path.write_text("runtimes:\n  - tool: node\n    channel: nightly\n")
        with pytest.raises(ConfigError, match="Invalid provisioning configuration"):
            load_config(path)
