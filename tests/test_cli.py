"""Tests for the typer command line interface."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from conftest import VALID_KEY, FakeRunner, fail, make_server, ok
from mullvad_wg import __version__, cli
from mullvad_wg.__main__ import main as module_main
from mullvad_wg.core.cache import save_cache
from mullvad_wg.core.manager import VPNManager
from mullvad_wg.core.settings import Settings

LIST_UNITS = ("systemctl", "list-unit-files", "wg-quick@*", "--no-legend", "--no-pager")


class MemoryAccounts:
    def __init__(self) -> None:
        self.account = None

    def save_account(self, account):
        self.account = account
        return True

    def load_account(self):
        return self.account


@pytest.fixture()
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def manager(tmp_path, fake_runner, monkeypatch) -> VPNManager:
    settings = Settings(wireguard_dir=tmp_path / "wireguard", cache_path=tmp_path / "servers.json")
    instance = VPNManager(settings=settings, runner=fake_runner, accounts=MemoryAccounts())
    monkeypatch.setattr(cli, "build_manager", lambda: instance)
    monkeypatch.setattr(cli, "is_root", lambda: True)
    return instance


@pytest.fixture()
def invoke():
    runner = CliRunner()

    def _invoke(*args):
        return runner.invoke(cli.app, list(args))

    return _invoke


def test_status_disconnected(manager, invoke):
    result = invoke("status")

    assert result.exit_code == 0
    assert "Disconnected" in result.output
    assert "Autostart: -" in result.output


def test_connect_success(manager, fake_runner, invoke):
    manager.store.write_profile(make_server(), VALID_KEY, "10.66.1.2/32")

    result = invoke("connect", "se-mma-wg-001")

    assert result.exit_code == 0, result.output
    assert "Connected to se-mma-wg-001" in result.output
    assert ("wg-quick", "up", "se-mma-wg-001") in fake_runner.calls


def test_connect_missing_profile_exits_nonzero(manager, invoke):
    result = invoke("connect", "se-mma-wg-001")

    assert result.exit_code == 1
    assert "No profile for se-mma-wg-001" in result.output


def test_connect_requires_root(manager, invoke, monkeypatch):
    monkeypatch.setattr(cli, "is_root", lambda: False)

    result = invoke("connect", "se-mma-wg-001")

    assert result.exit_code == 1
    assert "must be run as root" in result.output


def test_disconnect_reports_previous_code(manager, fake_runner, invoke):
    fake_runner.script(("wg", "show"), ok("interface: se-mma-wg-001\n"))

    result = invoke("disconnect")

    assert result.exit_code == 0
    assert "Disconnected from se-mma-wg-001" in result.output
    assert ("wg-quick", "down", "se-mma-wg-001") in fake_runner.calls


def test_disconnect_failure(manager, fake_runner, invoke):
    fake_runner.script(("wg", "show"), ok("interface: se-mma-wg-001\n"))
    fake_runner.script(("wg-quick", "down", "se-mma-wg-001"), fail("Operation not permitted"))

    result = invoke("disconnect")

    assert result.exit_code == 1
    assert "Operation not permitted" in result.output


def test_list_profiles(manager, fake_runner, invoke):
    manager.store.write_profile(make_server("se-mma-wg-001"), VALID_KEY, "10.66.1.2/32")
    manager.store.write_profile(make_server("us-nyc-wg-302"), VALID_KEY, "10.66.1.2/32")
    fake_runner.script(LIST_UNITS, ok("wg-quick@us-nyc-wg-302.service enabled enabled\n"))

    result = invoke("list")

    assert result.exit_code == 0
    assert "se-mma-wg-001" in result.output
    assert "us-nyc-wg-302" in result.output


def test_autostart_toggle(manager, fake_runner, invoke):
    result = invoke("autostart", "se-mma-wg-001")

    assert result.exit_code == 0
    assert "Enabled autostart for se-mma-wg-001" in result.output
    assert ("systemctl", "enable", "wg-quick@se-mma-wg-001.service") in fake_runner.calls


def test_servers_from_cache(manager, invoke):
    save_cache([make_server("se-mma-wg-001"), make_server("se-mma-wg-002")], manager.settings.cache_path)

    countries = invoke("servers")
    relays = invoke("servers", "--country", "Sweden", "--city", "Malmö")

    assert countries.exit_code == 0
    assert "Sweden" in countries.output
    assert "Relay list fetched 0 min ago" in countries.output
    assert relays.exit_code == 0
    assert "se-mma-wg-002" in relays.output
    assert "185.213.154.68:51820" in relays.output


def test_servers_unknown_country(manager, invoke):
    save_cache([make_server()], manager.settings.cache_path)

    result = invoke("servers", "--country", "Atlantis")

    assert result.exit_code == 1


def test_remove_connected_profile_refused(manager, fake_runner, invoke):
    manager.store.write_profile(make_server(), VALID_KEY, "10.66.1.2/32")
    fake_runner.script(("wg", "show"), ok("interface: se-mma-wg-001\n"))

    result = invoke("remove", "se-mma-wg-001")

    assert result.exit_code == 1
    assert manager.store.exists("se-mma-wg-001")


def test_module_version(capsys):
    assert module_main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == __version__


@pytest.mark.parametrize(
    "seconds, expected",
    [(-5, "0 min"), (59, "0 min"), (600, "10 min"), (3 * 3600 + 120, "3 h 2 min"), (5 * 86400, "5 days")],
)
def test_format_age(seconds, expected):
    assert cli._format_age(seconds) == expected
