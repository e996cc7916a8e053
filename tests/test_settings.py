"""Tests for YAML settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("yaml")

from mullvad_wg.core import settings as settings_module
from mullvad_wg.core.settings import Settings, load_settings


def test_defaults_when_file_missing(tmp_path):
    loaded = load_settings(tmp_path / "missing.yaml")

    assert loaded == Settings()
    assert loaded.wireguard_dir == Path("/etc/wireguard")
    assert loaded.dns_server == "10.64.0.1"
    assert loaded.default_port == 51820


def test_values_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "wireguard_dir: ~/wg\n"
        "dns_server: 10.64.0.7\n"
        "default_port: '3155'\n"
        "unknown_key: true\n",
        encoding="utf-8",
    )

    loaded = load_settings(path)

    assert loaded.wireguard_dir == Path.home() / "wg"
    assert loaded.dns_server == "10.64.0.7"
    assert loaded.default_port == 3155
    assert loaded.extra == {"unknown_key": True}


def test_non_mapping_yaml_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    assert load_settings(path) == Settings()


def test_env_var_selects_config(tmp_path, monkeypatch):
    path = tmp_path / "alt.yaml"
    path.write_text("profile_marker: -mv-\n", encoding="utf-8")
    monkeypatch.setenv(settings_module.CONFIG_ENV_VAR, str(path))

    assert load_settings().profile_marker == "-mv-"


def test_malformed_yaml_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("wireguard_dir: [unclosed\n", encoding="utf-8")

    assert load_settings(path) == Settings()


def test_invalid_port_keeps_default(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("default_port: fifty\ndns_server: 10.64.0.9\n", encoding="utf-8")

    loaded = load_settings(path)

    assert loaded.default_port == 51820
    assert loaded.dns_server == "10.64.0.9"
