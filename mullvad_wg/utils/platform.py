"""Platform detection and dependency helpers."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from typing import Dict

import distro

REQUIRED_BINARIES = ["wg", "wg-quick", "resolvconf", "resolvectl", "iptables", "ip6tables", "systemctl"]


@dataclass
class PlatformInfo:
    id: str
    name: str
    version: str
    dependency_commands: Dict[str, str]


def is_root() -> bool:
    return os.geteuid() == 0


def detect_platform() -> PlatformInfo:
    distro_id = distro.id() or "linux"
    distro_name = distro.name(pretty=True) or "Linux"
    version = distro.version() or ""
    commands = {
        "wg": "sudo apt install wireguard-tools",
        "wg-quick": "sudo apt install wireguard-tools",
        "resolvconf": "sudo apt install openresolv",
        "resolvectl": "sudo apt install systemd-resolved",
        "iptables": "sudo apt install iptables",
        "ip6tables": "sudo apt install iptables",
        "systemctl": "sudo apt install systemd",
    }
    if distro_id in {"fedora", "centos", "rhel"}:
        commands = {
            "wg": "sudo dnf install wireguard-tools",
            "wg-quick": "sudo dnf install wireguard-tools",
            "resolvconf": "sudo dnf install openresolv",
            "resolvectl": "sudo dnf install systemd-resolved",
            "iptables": "sudo dnf install iptables",
            "ip6tables": "sudo dnf install iptables",
            "systemctl": "sudo dnf install systemd",
        }
    elif distro_id in {"arch", "manjaro"}:
        commands = {
            "wg": "sudo pacman -S wireguard-tools",
            "wg-quick": "sudo pacman -S wireguard-tools",
            "resolvconf": "sudo pacman -S openresolv",
            "resolvectl": "sudo pacman -S systemd",
            "iptables": "sudo pacman -S iptables",
            "ip6tables": "sudo pacman -S iptables",
            "systemctl": "sudo pacman -S systemd",
        }
    return PlatformInfo(id=distro_id, name=distro_name, version=version, dependency_commands=commands)


def check_dependencies() -> Dict[str, bool]:
    return {dep: shutil.which(dep) is not None for dep in REQUIRED_BINARIES}
