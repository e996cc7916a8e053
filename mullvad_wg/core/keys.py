"""WireGuard key material via ``wg genkey`` / ``wg pubkey``."""

from __future__ import annotations

from typing import Optional

from ..utils.processes import CommandRunner
from .errors import ExternalToolError

KEY_LENGTH = 44
KEY_PADDING = "="


def is_valid_key(value: Optional[str]) -> bool:
    """Base64 of 32 bytes: exactly 44 characters with trailing padding."""
    return bool(value) and len(value) == KEY_LENGTH and value.endswith(KEY_PADDING)


class KeyTool:
    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def generate_private_key(self) -> str:
        result = self._runner.run(["wg", "genkey"])
        if not result.ok:
            raise ExternalToolError("wg genkey", result.stderr or result.combined)
        return result.stdout.strip()

    def derive_public_key(self, private_key: str) -> str:
        result = self._runner.run(["wg", "pubkey"], input_text=private_key)
        if not result.ok:
            raise ExternalToolError("wg pubkey", result.stderr or result.combined)
        return result.stdout.strip()
