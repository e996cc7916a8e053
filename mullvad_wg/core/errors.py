"""Exceptions raised by the mullvad-wg core."""

from __future__ import annotations

from pathlib import Path
from typing import Union


class MullvadWGError(Exception):
    """Base class for every error reported to the operator."""


class MissingProfileError(MullvadWGError):
    def __init__(self, code: str, path: Union[str, Path, None] = None) -> None:
        self.code = code
        self.path = path
        location = f": {path}" if path else ""
        super().__init__(f"No profile for {code}{location}. Run setup first.")


class ExternalToolError(MullvadWGError):
    """An external command failed; ``output`` is its stdout+stderr untouched."""

    def __init__(self, tool: str, output: str) -> None:
        self.tool = tool
        self.output = output
        super().__init__(f"{tool} failed:\n{output.strip()}")


class ClassifiedTunnelError(MullvadWGError):
    """``wg-quick up`` failed with a recognised condition."""


class ModuleNotLoadedError(ClassifiedTunnelError):
    def __init__(self) -> None:
        super().__init__("WireGuard module not loaded. Run: sudo modprobe wireguard")


class InterfaceExistsError(ClassifiedTunnelError):
    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Interface {code} already exists. Disconnect first.")


class SignatureMismatchRetryFailed(ClassifiedTunnelError):
    def __init__(self, output: str) -> None:
        self.output = output
        super().__init__(f"wg-quick up failed after resolvconf fix:\n{output.strip()}")


class DisconnectError(MullvadWGError):
    def __init__(self, code: str, cause: str) -> None:
        self.code = code
        self.cause = cause
        super().__init__(f"Failed to disconnect {code}: {cause}")


class RegistrationError(MullvadWGError):
    def __init__(self, server_message: str) -> None:
        self.server_message = server_message
        super().__init__(f"Mullvad API error: {server_message}")


class DirectoryError(MullvadWGError):
    """The relay directory could not be fetched or understood."""


class PersistenceError(MullvadWGError):
    def __init__(self, path: Union[str, Path], cause: BaseException, written: int = 0) -> None:
        self.path = path
        self.cause = cause
        self.written = written
        super().__init__(f"Failed to write {path}: {cause}")


class SetupError(MullvadWGError, ValueError):
    pass
