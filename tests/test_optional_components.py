"""
Tests for optional components — selection parsing and database / Docker installs.
"""

from unittest.mock import MagicMock, patch

from devsetup.core.models.profile import ProvisionConfig
from devsetup.core.models.action import Receipt
from devsetup.core.services.provision.execution.optional_components import install_component
from devsetup.core.services.provision.execution.services import enable_and_start
from devsetup.core.services.provision.selection import (
    choose_container_engine,
    choose_databases,
    is_affirmative,
    parse_selection,
    selection_menu,
)

_OC = "devsetup.core.services.provision.execution.optional_components"

CATALOG = ProvisionConfig().database_catalog()


def _scripted(*answers: str):
    """A prompt that returns the given answers in order."""
    prompt = MagicMock(side_effect=list(answers))
    return prompt


# ── Selection ────────────────────────────────────────────────────────


class TestIsAffirmative:
    def test_y_and_upper_y(self):
        assert is_affirmative("y")
        assert is_affirmative(" Y \n")

    def test_everything_else_is_no(self):
        for answer in ("yes", "n", "", "1", "yy", None):
            assert not is_affirmative(answer)


class TestParseSelection:
    def test_numbers(self):
        picked = parse_selection("1 3", CATALOG)
        assert [c.key for c in picked] == ["postgresql", "redis"]

    def test_keys_and_numbers_mixed(self):
        picked = parse_selection("mysql 2", CATALOG)
        assert [c.key for c in picked] == ["mysql", "mongodb"]

    def test_duplicates_removed(self):
        assert len(parse_selection("1 1 postgresql", CATALOG)) == 1

    def test_invalid_tokens_ignored(self):
        assert parse_selection("9 x -1 ;rm", CATALOG) == []

    def test_partially_valid(self):
        picked = parse_selection("7 3", CATALOG)
        assert [c.key for c in picked] == ["redis"]

    def test_empty_and_none(self):
        assert parse_selection("", CATALOG) == []
        assert parse_selection(None, CATALOG) == []

    def test_list_input(self):
        assert [c.key for c in parse_selection(["4"], CATALOG)] == ["mysql"]

    def test_menu_lists_every_option(self):
        menu = selection_menu(CATALOG)
        for num, spec in CATALOG.items():
            assert f"{num}) {spec.label}" in menu


class TestChooseDatabases:
    def test_decline_asks_once(self):
        prompt = _scripted("n")
        assert choose_databases(CATALOG, prompt) == []
        assert prompt.call_count == 1

    def test_accept_then_select(self):
        prompt = _scripted("y", "1 3")
        picked = choose_databases(CATALOG, prompt)
        assert [c.key for c in picked] == ["postgresql", "redis"]

    def test_accept_with_garbage_selects_nothing(self):
        assert choose_databases(CATALOG, _scripted("y", "banana")) == []

    def test_preselected_skips_prompt(self):
        prompt = _scripted()
        picked = choose_databases(CATALOG, prompt, preselected=["redis"])
        assert [c.key for c in picked] == ["redis"]
        prompt.assert_not_called()


class TestChooseContainerEngine:
    def test_yes(self):
        assert choose_container_engine(_scripted("y")) is True

    def test_word_yes_is_no(self):
        assert choose_container_engine(_scripted("yes")) is False

    def test_preselected(self):
        prompt = _scripted()
        assert choose_container_engine(prompt, preselected=False) is False
        prompt.assert_not_called()


# ── Installs ─────────────────────────────────────────────────────────


class TestEnableAndStart:
    def test_enable_then_start(self, ok_run):
        with patch(
            "devsetup.core.services.provision.execution.services.run_command",
            return_value=ok_run,
        ) as run:
            assert enable_and_start("redis-server")["ok"]
        assert [c[0][0] for c in run.call_args_list] == [
            ["systemctl", "enable", "redis-server"],
            ["systemctl", "start", "redis-server"],
        ]

    def test_empty_service(self):
        assert enable_and_start("")["ok"] is False


class TestInstallComponent:
    def test_present_skipped(self, apt_platform):
        with patch(f"{_OC}.command_exists", return_value=True), \
             patch(f"{_OC}.run_command") as run:
            receipt = install_component(CATALOG["1"], apt_platform)
        assert receipt.skipped
        run.assert_not_called()

    def test_apt_only_on_dnf_skipped_with_warning(self, dnf_platform):
        with patch(f"{_OC}.command_exists", return_value=False), \
             patch(f"{_OC}.run_command") as run:
            receipt = install_component(CATALOG["2"], dnf_platform)
        assert receipt.skipped
        assert receipt.metadata["unsupported"] is True
        run.assert_not_called()

    def test_redis_on_apt_uses_redis_server_unit(self, apt_platform, ok_run):
        with patch(f"{_OC}.command_exists", return_value=False), \
             patch(f"{_OC}.refresh_package_index", return_value=Receipt.success("package-index")), \
             patch(f"{_OC}.run_command", return_value=ok_run) as run, \
             patch(f"{_OC}.enable_and_start", return_value=ok_run) as start:
            receipt = install_component(CATALOG["3"], apt_platform)
        assert receipt.ok
        assert run.call_args[0][0][-1] == "redis"
        start.assert_called_once_with("redis-server")

    def test_mysql_on_pacman_installs_mariadb(self, ok_run):
        from devsetup.core.models.target import PlatformDescriptor

        pacman = PlatformDescriptor(package_manager="pacman")
        with patch(f"{_OC}.command_exists", return_value=False), \
             patch(f"{_OC}.refresh_package_index", return_value=Receipt.success("package-index")), \
             patch(f"{_OC}.run_command", return_value=ok_run) as run, \
             patch(f"{_OC}.enable_and_start", return_value=ok_run) as start:
            receipt = install_component(CATALOG["4"], pacman)
        assert receipt.ok
        assert run.call_args[0][0] == ["pacman", "-S", "--noconfirm", "--needed", "mariadb"]
        start.assert_called_once_with("mariadb")

    def test_mongodb_adds_vendor_repository(self, apt_platform, ok_run):
        with patch(f"{_OC}.command_exists", return_value=False), \
             patch(f"{_OC}.add_apt_repository", return_value=ok_run) as add_repo, \
             patch(f"{_OC}.refresh_package_index") as refresh, \
             patch(f"{_OC}.run_command", return_value=ok_run), \
             patch(f"{_OC}.enable_and_start", return_value=ok_run) as start:
            receipt = install_component(CATALOG["2"], apt_platform)
        assert receipt.ok
        add_repo.assert_called_once()
        refresh.assert_not_called()
        start.assert_called_once_with("mongod")

    def test_docker_post_install(self, apt_platform, ok_run):
        docker = ProvisionConfig().container_engine()
        with patch(f"{_OC}.command_exists", return_value=False), \
             patch(f"{_OC}.add_apt_repository", return_value=ok_run), \
             patch(f"{_OC}.write_root_file", return_value=ok_run) as write, \
             patch(f"{_OC}.run_command", return_value=ok_run) as run, \
             patch(f"{_OC}.enable_and_start", return_value=ok_run), \
             patch.dict("os.environ", {"USER": "dev"}):
            receipt = install_component(docker, apt_platform)
        assert receipt.ok
        assert write.call_args[0][0] == "/etc/docker/daemon.json"
        assert '"log-driver":"local"' in write.call_args[0][1]
        assert run.call_args[0][0] == ["usermod", "-aG", "docker", "dev"]

    def test_service_failure_is_a_failed_receipt(self, apt_platform, ok_run):
        no_systemd = {"ok": False, "error": "System has not been booted with systemd", "return_code": 1}
        with patch(f"{_OC}.command_exists", return_value=False), \
             patch(f"{_OC}.refresh_package_index", return_value=Receipt.success("package-index")), \
             patch(f"{_OC}.run_command", return_value=ok_run), \
             patch(f"{_OC}.enable_and_start", return_value=no_systemd):
            receipt = install_component(CATALOG["1"], apt_platform)
        assert receipt.failed
        assert receipt.changed is True
        assert "did not start" in receipt.error
