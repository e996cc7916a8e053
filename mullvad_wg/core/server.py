"""Relay descriptions and the country/city grouping used for browsing."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List

from .settings import DEFAULT_PORT

HOSTNAME_SUFFIX = "-wireguard"


def code_from_hostname(hostname: str) -> str:
    """``se-mma-wg-001-wireguard`` -> ``se-mma-wg-001``."""
    if hostname.endswith(HOSTNAME_SUFFIX):
        return hostname[: -len(HOSTNAME_SUFFIX)]
    return hostname


@dataclass
class Server:
    """One WireGuard relay; ``code`` names its profile, interface and unit."""

    code: str
    hostname: str
    public_key: str
    ipv4_addr: str
    port: int
    country: str
    city: str

    def endpoint(self) -> str:
        return f"{self.ipv4_addr}:{self.port}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Server":
        hostname = data.get("hostname", "")
        return cls(
            code=data.get("code") or code_from_hostname(hostname),
            hostname=hostname,
            public_key=data.get("public_key", ""),
            ipv4_addr=data.get("ipv4_addr", ""),
            port=int(data.get("port", DEFAULT_PORT)),
            country=data.get("country", ""),
            city=data.get("city", ""),
        )


ServerTree = Dict[str, Dict[str, List[Server]]]


def group_servers(servers: Iterable[Server]) -> ServerTree:
    """Group servers as country -> city -> servers, every level sorted."""
    grouped: Dict[str, Dict[str, List[Server]]] = {}
    for server in servers:
        grouped.setdefault(server.country, {}).setdefault(server.city, []).append(server)
    tree: ServerTree = {}
    for country in sorted(grouped):
        cities = grouped[country]
        tree[country] = {city: sorted(cities[city], key=lambda s: s.code) for city in sorted(cities)}
    return tree


def get_countries(tree: ServerTree) -> List[str]:
    return list(tree.keys())


def get_cities(tree: ServerTree, country: str) -> List[str]:
    return list(tree.get(country, {}).keys())


def get_servers_in_city(tree: ServerTree, country: str, city: str) -> List[Server]:
    return list(tree.get(country, {}).get(city, []))
