"""
Tests for shell configuration — backups, atomic writes, templates, installers.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

from devsetup.core.context import set_dry_run
from devsetup.core.models.target import PlatformDescriptor
from devsetup.core.models.profile import ShellSettings
from devsetup.core.services.provision.data.shell_templates import (
    INPUTRC_TEMPLATE,
    ZSHRC_TEMPLATE,
)
from devsetup.core.services.provision.execution.backup import (
    atomic_write,
    backup_file,
    replace_with_backup,
)
from devsetup.core.services.provision.execution.shell_config import (
    install_posh_theme,
    install_zsh_plugin,
    login_shell,
    render_template,
    set_login_shell,
    write_config_file,
)
from devsetup.core.services.provision.orchestration.shell_setup import template_values

_SC = "devsetup.core.services.provision.execution.shell_config"


def _passwd(shell: str) -> MagicMock:
    return MagicMock(pw_shell=shell)


# ── Backup ───────────────────────────────────────────────────────────


class TestBackupFile:
    def test_byte_identical_copy(self, tmp_path: Path):
        original = tmp_path / ".zshrc"
        data = b"export A=1\n\xe2\x9c\x93 unicode\n"
        original.write_bytes(data)
        backup = backup_file(original, timestamp="20240101_120000")
        assert backup == tmp_path / ".zshrc.backup.20240101_120000"
        assert backup.read_bytes() == data

    def test_missing_file_no_backup(self, tmp_path: Path):
        assert backup_file(tmp_path / ".zshrc") is None

    def test_same_second_does_not_clobber(self, tmp_path: Path):
        original = tmp_path / ".inputrc"
        original.write_text("one")
        first = backup_file(original, timestamp="20240101_120000")
        original.write_text("two")
        second = backup_file(original, timestamp="20240101_120000")
        assert first != second
        assert first.read_text() == "one"
        assert second.read_text() == "two"

    def test_dry_run_copies_nothing(self, tmp_path: Path):
        original = tmp_path / ".zshrc"
        original.write_text("x")
        set_dry_run(True)
        backup = backup_file(original, timestamp="20240101_120000")
        assert backup is not None
        assert not backup.exists()


class TestAtomicWrite:
    def test_replaces_content(self, tmp_path: Path):
        target = tmp_path / ".zshrc"
        target.write_text("old")
        atomic_write(target, "new")
        assert target.read_text() == "new"
        assert [p.name for p in tmp_path.iterdir()] == [".zshrc"]

    def test_replace_with_backup(self, tmp_path: Path):
        target = tmp_path / ".zshrc"
        target.write_text("old")
        backup = replace_with_backup(target, "new")
        assert target.read_text() == "new"
        assert backup.read_text() == "old"


# ── Templates ────────────────────────────────────────────────────────


class TestRenderTemplate:
    def test_only_known_keys(self):
        out = render_template("a={x} b=${HOME} c={y}", {"x": "1"})
        assert out == "a=1 b=${HOME} c={y}"

    def test_zshrc_uses_apt_binary_names(self, fake_home: Path):
        values = template_values(ShellSettings(), PlatformDescriptor(package_manager="apt"))
        zshrc = render_template(ZSHRC_TEMPLATE, values)
        assert "batcat" in zshrc
        assert "fdfind" in zshrc
        assert str(fake_home / ".poshthemes" / "night-owl.omp.json") in zshrc
        for key in ("{theme_path}", "{plugin_dir}", "{bat}", "{fd}"):
            assert key not in zshrc

    def test_zshrc_pacman_names(self, fake_home: Path):
        values = template_values(ShellSettings(), PlatformDescriptor(package_manager="pacman"))
        assert values["bat"] == "bat"
        assert values["fd"] == "fd"

    def test_inputrc_is_static(self):
        assert render_template(INPUTRC_TEMPLATE, {"theme_path": "x"}) == INPUTRC_TEMPLATE


# ── Config files ─────────────────────────────────────────────────────


class TestWriteConfigFile:
    def test_fresh_file_no_backup(self, tmp_path: Path):
        target = tmp_path / ".zshrc"
        receipt = write_config_file(target, "content\n")
        assert receipt.ok
        assert "backup" not in receipt.metadata
        assert target.read_text() == "content\n"

    def test_existing_file_backed_up(self, tmp_path: Path):
        target = tmp_path / ".zshrc"
        target.write_text("mine\n")
        receipt = write_config_file(target, "content\n")
        assert receipt.ok
        backup = Path(receipt.metadata["backup"])
        assert backup.read_text() == "mine\n"
        assert backup.name.startswith(".zshrc.backup.")

    def test_identical_content_untouched(self, tmp_path: Path):
        target = tmp_path / ".zshrc"
        target.write_text("content\n")
        receipt = write_config_file(target, "content\n")
        assert receipt.skipped
        assert receipt.changed is False
        assert [p.name for p in tmp_path.iterdir()] == [".zshrc"]

    def test_dry_run_writes_nothing(self, tmp_path: Path):
        target = tmp_path / ".zshrc"
        target.write_text("mine\n")
        set_dry_run(True)
        receipt = write_config_file(target, "content\n")
        assert receipt.ok
        assert receipt.metadata["dry_run"] is True
        assert target.read_text() == "mine\n"
        assert [p.name for p in tmp_path.iterdir()] == [".zshrc"]


# ── Installers ───────────────────────────────────────────────────────


class TestShellInstallers:
    def test_login_shell_already_zsh(self):
        with patch(f"{_SC}.pwd.getpwuid", return_value=_passwd("/usr/bin/zsh")), \
             patch(f"{_SC}.shutil.which", return_value="/usr/bin/zsh"), \
             patch(f"{_SC}.run_command") as run:
            assert set_login_shell().skipped
        run.assert_not_called()

    def test_login_shell_changed_earlier_this_session(self, monkeypatch):
        # chsh leaves $SHELL untouched until the next login
        monkeypatch.setenv("SHELL", "/bin/bash")
        with patch(f"{_SC}.pwd.getpwuid", return_value=_passwd("/usr/bin/zsh")), \
             patch(f"{_SC}.shutil.which", return_value="/usr/bin/zsh"), \
             patch(f"{_SC}.run_command") as run:
            assert set_login_shell().skipped
        run.assert_not_called()

    def test_login_shell_env_fallback(self, monkeypatch):
        monkeypatch.setenv("SHELL", "/usr/bin/zsh")
        with patch(f"{_SC}.pwd.getpwuid", side_effect=KeyError("uid")):
            assert login_shell() == "/usr/bin/zsh"

    def test_login_shell_chsh(self, ok_run):
        with patch(f"{_SC}.pwd.getpwuid", return_value=_passwd("/bin/bash")), \
             patch(f"{_SC}.shutil.which", return_value="/usr/bin/zsh"), \
             patch(f"{_SC}.run_command", return_value=ok_run) as run:
            assert set_login_shell().ok
        assert run.call_args[0][0] == ["chsh", "-s", "/usr/bin/zsh"]
        assert run.call_args[1]["interactive"] is True

    def test_login_shell_without_zsh(self):
        with patch(f"{_SC}.shutil.which", return_value=None):
            assert set_login_shell().failed

    def test_plugin_present_skipped(self, tmp_path: Path):
        (tmp_path / "zsh-autosuggestions").mkdir()
        with patch(f"{_SC}.run_command") as run:
            receipt = install_zsh_plugin("zsh-autosuggestions", "https://x/y.git", plugin_dir=str(tmp_path))
        assert receipt.skipped
        run.assert_not_called()

    def test_plugin_clone(self, tmp_path: Path, ok_run):
        with patch(f"{_SC}.run_command", return_value=ok_run) as run:
            receipt = install_zsh_plugin("zsh-autosuggestions", "https://x/y.git", plugin_dir=str(tmp_path))
        assert receipt.ok
        assert run.call_args[0][0] == [
            "git", "clone", "--depth", "1", "https://x/y.git", str(tmp_path / "zsh-autosuggestions"),
        ]

    def test_theme_download(self, fake_home: Path):
        with patch(f"{_SC}.download_file", return_value={"ok": True, "size_bytes": 10}) as dl:
            receipt = install_posh_theme("night-owl")
        assert receipt.ok
        url, dest = dl.call_args[0]
        assert url.endswith("/themes/night-owl.omp.json")
        assert dest == fake_home / ".poshthemes" / "night-owl.omp.json"

    def test_theme_present_skipped(self, fake_home: Path):
        themes = fake_home / ".poshthemes"
        themes.mkdir()
        (themes / "night-owl.omp.json").write_text("{}")
        with patch(f"{_SC}.download_file") as dl:
            assert install_posh_theme("night-owl").skipped
        dl.assert_not_called()
