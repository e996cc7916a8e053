"""Filesystem locations used by mullvad-wg."""

from __future__ import annotations

import os
from pathlib import Path

APP_DIR_NAME = "mullvad-wg"

WIREGUARD_DIR = Path("/etc/wireguard")
CONFIG_ROOT = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / APP_DIR_NAME
CACHE_ROOT = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache")) / APP_DIR_NAME
STATE_ROOT = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state")) / APP_DIR_NAME

CONFIG_FILE = CONFIG_ROOT / "config.yaml"
CACHE_FILE = CACHE_ROOT / "servers.json"
LOG_DIR = STATE_ROOT / "logs"


def expand_path(path: str) -> Path:
    """Expand environment variables and user references in ``path``."""
    return Path(os.path.expandvars(os.path.expanduser(path)))
