"""User configuration loaded from YAML."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..utils.logging import get_logger
from .app_paths import CACHE_FILE, CONFIG_FILE, WIREGUARD_DIR, expand_path

logger = get_logger("settings")

CONFIG_ENV_VAR = "MULLVAD_WG_CONFIG"
RELAY_LIST_URL = "https://api.mullvad.net/public/relays/wireguard/v1/"
REGISTER_KEY_URL = "https://api.mullvad.net/wg"
DNS_SERVER = "10.64.0.1"
DEFAULT_PORT = 51820
PROFILE_MARKER = "-wg-"

_PATH_FIELDS = {"wireguard_dir", "cache_path"}


@dataclass
class Settings:
    wireguard_dir: Path = WIREGUARD_DIR
    dns_server: str = DNS_SERVER
    default_port: int = DEFAULT_PORT
    relay_list_url: str = RELAY_LIST_URL
    register_url: str = REGISTER_KEY_URL
    cache_path: Path = CACHE_FILE
    profile_marker: str = PROFILE_MARKER
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        known = {f.name for f in fields(cls) if f.name != "extra"}
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                extra[key] = value
                continue
            if key in _PATH_FIELDS:
                value = expand_path(str(value))
            elif key == "default_port":
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    logger.warning("Invalid default_port %r; using %d", value, DEFAULT_PORT)
                    continue
            else:
                value = str(value)
            values[key] = value
        if extra:
            logger.warning("Ignoring unknown configuration keys: %s", ", ".join(sorted(extra)))
        return cls(extra=extra, **values)


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    return expand_path(override) if override else CONFIG_FILE


def load_settings(path: Optional[Path] = None) -> Settings:
    """Read settings from ``path`` (or the default location), falling back to defaults."""
    path = Path(path) if path else config_path()
    if not path.exists():
        return Settings()
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        logger.warning("Configuration %s is not valid YAML; using defaults: %s", path, exc)
        return Settings()
    if not isinstance(data, dict):
        logger.warning("Configuration %s is not a mapping; using defaults", path)
        return Settings()
    return Settings.from_dict(data)
