"""DNS leak prevention for an active tunnel interface."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from ..utils.logging import get_logger
from ..utils.processes import CommandRunner
from .settings import DNS_SERVER

logger = get_logger("firewall")

DNS_PORT = "53"
FIREWALL_BINARIES = ("iptables", "ip6tables")
PROTOCOLS = ("udp", "tcp")

Rule = Tuple[str, List[str]]


class FirewallManager:
    """Routes DNS through the tunnel and blocks port 53 everywhere else.

    Every command issued here is best-effort: a failure is logged and the
    next step still runs. Inserted and deleted rules use identical argument
    vectors so ``remove`` undoes exactly what ``apply`` added.
    """

    def __init__(self, runner: CommandRunner, dns_server: str = DNS_SERVER) -> None:
        self._runner = runner
        self.dns_server = dns_server

    def rules(self, interface: str) -> List[Rule]:
        rules: List[Rule] = []
        for binary in FIREWALL_BINARIES:
            for proto in PROTOCOLS:
                rules.append(
                    (
                        binary,
                        ["OUTPUT", "!", "-o", interface, "-p", proto, "--dport", DNS_PORT, "-j", "DROP"],
                    )
                )
        return rules

    def apply(self, interface: str) -> None:
        logger.info("[%s] Applying DNS leak protection", interface)
        self._best_effort(["resolvectl", "dns", interface, self.dns_server], interface, "SET DNS")
        self._best_effort(["resolvectl", "domain", interface, "~."], interface, "SET DOMAIN")
        self.flush_dns_cache()
        for binary, args in self.rules(interface):
            self._best_effort([binary, "-I", *args], interface, f"{binary} INSERT")

    def remove(self, interface: str) -> None:
        logger.info("[%s] Removing DNS leak protection", interface)
        for binary, args in self.rules(interface):
            self._best_effort([binary, "-D", *args], interface, f"{binary} DELETE")
        self.flush_dns_cache()

    def flush_dns_cache(self) -> None:
        self._best_effort(["resolvectl", "flush-caches"], "system", "FLUSH DNS cache")

    def _best_effort(self, command: Sequence[str], scope: str, action: str) -> bool:
        result = self._runner.run(command)
        if result.ok:
            logger.debug("[%s] %s succeeded", scope, action)
            return True
        message = result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
        logger.warning("[%s] %s failed: %s", scope, action, message)
        return False
