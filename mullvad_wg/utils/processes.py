"""External process invocation."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .logging import get_logger

logger = get_logger("processes")

NOT_FOUND_EXIT_CODE = 127


@dataclass(frozen=True)
class CommandResult:
    args: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def combined(self) -> str:
        return f"{self.stdout}{self.stderr}"


class CommandRunner:
    """Runs one external command to completion and captures its output.

    Commands block until the child exits; there is no timeout. A binary that
    cannot be started is reported as exit code 127 with the OS error on stderr
    so callers only have to inspect the result.
    """

    def run(self, command: Sequence[str], input_text: Optional[str] = None) -> CommandResult:
        args = tuple(command)
        logger.debug("Running %s", " ".join(args))
        try:
            completed = subprocess.run(
                list(args),
                input=input_text,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            message = f"{args[0]}: {exc.strerror or exc}"
            logger.error("Failed to execute %s", message)
            return CommandResult(args, NOT_FOUND_EXIT_CODE, "", message)
        result = CommandResult(args, completed.returncode, completed.stdout or "", completed.stderr or "")
        if not result.ok:
            logger.debug("%s exited with code %s: %s", args[0], result.returncode, result.combined.strip())
        return result
