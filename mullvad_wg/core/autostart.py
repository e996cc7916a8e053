"""Boot-time activation through ``wg-quick@<code>.service`` units."""

from __future__ import annotations

import re
from typing import List, Optional

from ..utils.logging import get_logger
from ..utils.processes import CommandRunner
from .errors import ExternalToolError
from .settings import PROFILE_MARKER

logger = get_logger("autostart")

UNIT_TEMPLATE = "wg-quick@{code}.service"
UNIT_PATTERN = "wg-quick@*"
UNIT_RE = re.compile(r"^wg-quick@(?P<code>.+)\.service$")


class AutostartRegistry:
    """Keeps at most one profile enabled at boot.

    ``enable`` disables the other enabled units before enabling the new one.
    The two steps are separate ``systemctl`` calls, so an interruption in
    between can leave no profile enabled.
    """

    def __init__(self, runner: CommandRunner, marker: str = PROFILE_MARKER) -> None:
        self._runner = runner
        self.marker = marker

    @staticmethod
    def unit_name(code: str) -> str:
        return UNIT_TEMPLATE.format(code=code)

    def is_enabled(self, code: str) -> bool:
        result = self._runner.run(["systemctl", "is-enabled", self.unit_name(code)])
        return result.ok and result.stdout.strip() == "enabled"

    def enabled_profiles(self) -> List[str]:
        result = self._runner.run(
            ["systemctl", "list-unit-files", UNIT_PATTERN, "--no-legend", "--no-pager"]
        )
        if not result.ok:
            logger.debug("Unable to list unit files: %s", result.combined.strip())
            return []
        codes: List[str] = []
        for line in result.stdout.splitlines():
            parts = line.split()
            if len(parts) < 2:
                continue
            match = UNIT_RE.match(parts[0])
            if not match or parts[1] != "enabled":
                continue
            code = match.group("code")
            if self.marker in code:
                codes.append(code)
        return codes

    def get_enabled_profile(self) -> Optional[str]:
        enabled = self.enabled_profiles()
        return enabled[0] if enabled else None

    def enable(self, code: str) -> None:
        for other in self.enabled_profiles():
            if other == code:
                continue
            result = self._runner.run(["systemctl", "disable", self.unit_name(other)])
            if result.ok:
                logger.info("Disabled autostart for %s", other)
            else:
                logger.warning(
                    "Failed to disable autostart for %s: %s", other, result.combined.strip()
                )
        result = self._runner.run(["systemctl", "enable", self.unit_name(code)])
        if not result.ok:
            raise ExternalToolError("systemctl enable", result.combined)
        logger.info("Enabled autostart for %s", code)

    def disable(self, code: str) -> None:
        result = self._runner.run(["systemctl", "disable", self.unit_name(code)])
        if not result.ok:
            raise ExternalToolError("systemctl disable", result.combined)
        logger.info("Disabled autostart for %s", code)

    def toggle(self, code: str) -> bool:
        """Flip autostart for ``code``; returns whether it is now enabled."""
        if self.get_enabled_profile() == code:
            self.disable(code)
            return False
        self.enable(code)
        return True
