"""Tunnel lifecycle: connect, disconnect and status via ``wg-quick``."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..utils.logging import get_logger
from ..utils.processes import CommandResult, CommandRunner
from .errors import (
    DisconnectError,
    ExternalToolError,
    InterfaceExistsError,
    MissingProfileError,
    ModuleNotLoadedError,
    MullvadWGError,
    SignatureMismatchRetryFailed,
)
from .firewall import FirewallManager
from .profile_store import ProfileStore
from .settings import PROFILE_MARKER

logger = get_logger("controller")

SIGNATURE_MISMATCH = "signature mismatch"
MODULE_NOT_LOADED = "RTNETLINK answers: Operation not supported"
INTERFACE_EXISTS = "already exists"


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


@dataclass(frozen=True)
class ConnectionStatus:
    state: ConnectionState = ConnectionState.DISCONNECTED
    code: Optional[str] = None

    @classmethod
    def connected_to(cls, code: str) -> "ConnectionStatus":
        return cls(ConnectionState.CONNECTED, code)

    @classmethod
    def disconnected(cls) -> "ConnectionStatus":
        return cls()

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def describe(self) -> str:
        if self.is_connected:
            return f"Connected to {self.code}"
        return "Disconnected"


class ConnectionController:
    """Brings profiles up and down and reports what is active.

    Nothing about the connection is remembered between calls; ``get_status``
    asks ``wg show`` every time. Tunnel up/down failures are raised, while
    firewall and DNS housekeeping only logs.
    """

    def __init__(
        self,
        runner: CommandRunner,
        store: ProfileStore,
        firewall: FirewallManager,
        marker: str = PROFILE_MARKER,
    ) -> None:
        self._runner = runner
        self._store = store
        self._firewall = firewall
        self.marker = marker

    def get_status(self) -> ConnectionStatus:
        result = self._runner.run(["wg", "show"])
        if not result.ok:
            return ConnectionStatus.disconnected()
        for line in result.stdout.splitlines():
            if not line.startswith("interface:"):
                continue
            interface = line[len("interface:"):].strip()
            if interface and self.marker in interface:
                return ConnectionStatus.connected_to(interface)
        return ConnectionStatus.disconnected()

    def connect(self, code: str) -> ConnectionStatus:
        current = self.get_status()
        if current.is_connected and current.code:
            logger.info("Disconnecting %s before connecting %s", current.code, code)
            try:
                self.disconnect(current.code)
            except MullvadWGError as exc:
                raise DisconnectError(current.code, str(exc)) from exc

        if not self._store.exists(code):
            raise MissingProfileError(code, self._store.profile_path(code))

        result = self._tunnel_up(code)
        if not result.ok:
            self._recover_or_raise(code, result)

        self._firewall.apply(code)
        logger.info("Connected to %s", code)
        return ConnectionStatus.connected_to(code)

    def disconnect(self, code: str) -> ConnectionStatus:
        # Leak rules must be gone before the interface they exempt disappears.
        self._firewall.remove(code)
        result = self._runner.run(["wg-quick", "down", code])
        if not result.ok:
            raise ExternalToolError("wg-quick down", result.combined)
        self._firewall.flush_dns_cache()
        logger.info("Disconnected from %s", code)
        return ConnectionStatus.disconnected()

    def disconnect_current(self) -> ConnectionStatus:
        current = self.get_status()
        if not current.is_connected or not current.code:
            return current
        return self.disconnect(current.code)

    def _tunnel_up(self, code: str) -> CommandResult:
        return self._runner.run(["wg-quick", "up", code])

    def _recover_or_raise(self, code: str, result: CommandResult) -> None:
        combined = result.combined
        if SIGNATURE_MISMATCH in combined:
            logger.warning("[%s] resolvconf signature mismatch; refreshing and retrying once", code)
            refresh = self._runner.run(["resolvconf", "-u"])
            if not refresh.ok:
                logger.warning("resolvconf -u failed: %s", refresh.combined.strip())
            retry = self._tunnel_up(code)
            if retry.ok:
                return
            raise SignatureMismatchRetryFailed(retry.combined)
        if MODULE_NOT_LOADED in combined:
            raise ModuleNotLoadedError()
        if INTERFACE_EXISTS in combined:
            raise InterfaceExistsError(code)
        raise ExternalToolError("wg-quick up", combined)
