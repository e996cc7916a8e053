"""WireGuard profile files under /etc/wireguard, one per relay code."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional

from ..utils.logging import get_logger
from .errors import PersistenceError
from .keys import is_valid_key
from .server import Server
from .settings import DNS_SERVER, PROFILE_MARKER

logger = get_logger("profile_store")

PROFILE_SUFFIX = ".conf"
TEMP_SUFFIX = ".conf.tmp"
PROFILE_MODE = 0o600

PROFILE_TEMPLATE = """[Interface]
PrivateKey = {private_key}
Address = {address}
DNS = {dns}

[Peer]
PublicKey = {public_key}
Endpoint = {endpoint}
AllowedIPs = 0.0.0.0/0, ::/0
"""


class ProfileStore:
    """Reads, writes and enumerates ``<code>.conf`` profiles.

    Only files whose stem carries the profile marker (``-wg-``) are considered
    ours; anything else in the directory is left alone.
    """

    def __init__(
        self,
        directory: Path,
        dns_server: str = DNS_SERVER,
        marker: str = PROFILE_MARKER,
    ) -> None:
        self.directory = Path(directory)
        self.dns_server = dns_server
        self.marker = marker

    def profile_path(self, code: str) -> Path:
        return self.directory / f"{code}{PROFILE_SUFFIX}"

    def exists(self, code: str) -> bool:
        return self.profile_path(code).is_file()

    def list_profiles(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        codes = []
        try:
            entries = list(self.directory.iterdir())
        except OSError as exc:
            logger.warning("Unable to list %s: %s", self.directory, exc)
            return []
        for entry in entries:
            if entry.suffix != PROFILE_SUFFIX or not entry.is_file():
                continue
            if self.marker in entry.stem:
                codes.append(entry.stem)
        return sorted(codes)

    def extract_private_key(self, code: str) -> Optional[str]:
        path = self.profile_path(code)
        if not path.exists():
            return None
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(path, exc) from exc
        for raw in content.splitlines():
            line = raw.strip()
            if not line.lower().startswith("privatekey"):
                continue
            _, sep, value = line.partition("=")
            if not sep:
                continue
            key = value.strip()
            if is_valid_key(key):
                return key
        return None

    def find_any_existing_private_key(self) -> Optional[str]:
        for code in self.list_profiles():
            key = self.extract_private_key(code)
            if key:
                logger.debug("Reusing private key from profile %s", code)
                return key
        return None

    def render_profile(self, server: Server, private_key: str, address: str) -> str:
        return PROFILE_TEMPLATE.format(
            private_key=private_key,
            address=address,
            dns=self.dns_server,
            public_key=server.public_key,
            endpoint=server.endpoint(),
        )

    def write_profile(self, server: Server, private_key: str, address: str) -> Path:
        path = self.profile_path(server.code)
        tmp_path = self.directory / f"{server.code}{TEMP_SUFFIX}"
        content = self.render_profile(server, private_key, address)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, PROFILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                # A stale temp file keeps its old mode through O_CREAT.
                os.fchmod(handle.fileno(), PROFILE_MODE)
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, path)
        except OSError as exc:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise PersistenceError(path, exc) from exc
        logger.info("Wrote profile %s", path)
        return path

    def delete_profile(self, code: str) -> None:
        path = self.profile_path(code)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise PersistenceError(path, exc) from exc
        logger.info("Deleted profile %s", path)

    def write_all_profiles(self, servers: Iterable[Server], private_key: str, address: str) -> int:
        count = 0
        for server in servers:
            try:
                self.write_profile(server, private_key, address)
            except PersistenceError as exc:
                exc.written = count
                logger.error("Stopped after %d profile(s): %s", count, exc)
                raise
            count += 1
        return count
