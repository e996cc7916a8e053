"""Shared fakes standing in for the host's external tools."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from mullvad_wg.core.firewall import FirewallManager
from mullvad_wg.core.profile_store import ProfileStore
from mullvad_wg.core.server import Server
from mullvad_wg.utils.processes import CommandResult

VALID_KEY = "yAnz5TF+lXXJte14tji3zlMNq+hd2rYUIgJBgB3fBmk="
PEER_KEY = "hnRorSW0YHlHAzGb4Uc/sjOqQIrqDnpJnTQi/n7Rp1c="


def ok(stdout: str = "") -> CommandResult:
    return CommandResult((), 0, stdout, "")


def fail(stderr: str = "", stdout: str = "", code: int = 1) -> CommandResult:
    return CommandResult((), code, stdout, stderr)


class FakeRunner:
    """Scripted command runner recording every invocation.

    Results registered for a command are consumed in order; the last one is
    repeated. Unscripted commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, ...]] = []
        self.inputs: List[Optional[str]] = []
        self._scripts: Dict[Tuple[str, ...], List[CommandResult]] = {}

    def script(self, command: Sequence[str], *results: CommandResult) -> None:
        self._scripts[tuple(command)] = list(results)

    def run(self, command: Sequence[str], input_text: Optional[str] = None) -> CommandResult:
        args = tuple(command)
        self.calls.append(args)
        self.inputs.append(input_text)
        queue = self._scripts.get(args)
        if not queue:
            return CommandResult(args, 0, "", "")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        return CommandResult(args, result.returncode, result.stdout, result.stderr)

    def count(self, command: Sequence[str]) -> int:
        return self.calls.count(tuple(command))


def make_server(code: str = "se-mma-wg-001", ipv4: str = "185.213.154.68", port: int = 51820) -> Server:
    return Server(
        code=code,
        hostname=f"{code}-wireguard",
        public_key=PEER_KEY,
        ipv4_addr=ipv4,
        port=port,
        country="Sweden",
        city="Malmö",
    )


@pytest.fixture()
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def store(tmp_path) -> ProfileStore:
    return ProfileStore(tmp_path / "wireguard")


@pytest.fixture()
def firewall(runner) -> FirewallManager:
    return FirewallManager(runner)
