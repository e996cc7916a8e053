"""High-level manager wiring the core components together."""

from __future__ import annotations

from typing import Dict, List, Optional

from ..utils.logging import get_logger
from ..utils.platform import check_dependencies, detect_platform
from ..utils.processes import CommandRunner
from . import api
from .autostart import AutostartRegistry
from .cache import ServerCache, load_cache, save_cache
from .controller import ConnectionController, ConnectionStatus
from .errors import MullvadWGError
from .firewall import FirewallManager
from .keys import KeyTool
from .profile_store import ProfileStore
from .provisioning import ProvisionResult, provision
from .secrets import AccountStore
from .server import Server, ServerTree, group_servers
from .settings import Settings, load_settings

logger = get_logger("manager")


class VPNManager:
    """Single entry point used by the command line interface."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        runner: Optional[CommandRunner] = None,
        accounts: Optional[AccountStore] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.runner = runner or CommandRunner()
        self.store = ProfileStore(
            self.settings.wireguard_dir,
            dns_server=self.settings.dns_server,
            marker=self.settings.profile_marker,
        )
        self.firewall = FirewallManager(self.runner, dns_server=self.settings.dns_server)
        self.autostart = AutostartRegistry(self.runner, marker=self.settings.profile_marker)
        self.controller = ConnectionController(
            self.runner, self.store, self.firewall, marker=self.settings.profile_marker
        )
        self.keys = KeyTool(self.runner)
        self._accounts = accounts
        self.servers: List[Server] = []
        self.cache: Optional[ServerCache] = None

    @property
    def accounts(self) -> AccountStore:
        if self._accounts is None:
            self._accounts = AccountStore()
        return self._accounts

    def status(self) -> ConnectionStatus:
        return self.controller.get_status()

    def profiles(self) -> List[str]:
        return self.store.list_profiles()

    def connect(self, code: str) -> ConnectionStatus:
        return self.controller.connect(code)

    def disconnect(self) -> ConnectionStatus:
        return self.controller.disconnect_current()

    def autostart_profile(self) -> Optional[str]:
        return self.autostart.get_enabled_profile()

    def toggle_autostart(self, code: str) -> bool:
        return self.autostart.toggle(code)

    def delete_profile(self, code: str) -> None:
        status = self.status()
        if status.is_connected and status.code == code:
            raise MullvadWGError(f"Profile {code} is currently connected; disconnect first")
        self.store.delete_profile(code)

    async def load_servers(self, refresh: bool = False) -> List[Server]:
        if not refresh:
            cache = load_cache(self.settings.cache_path)
            if cache and cache.servers:
                logger.debug("Loaded %d servers from cache", len(cache.servers))
                self.cache = cache
                self.servers = cache.servers
                return self.servers
        self.servers = await api.fetch_servers(self.settings.relay_list_url, self.settings.default_port)
        try:
            self.cache = save_cache(self.servers, self.settings.cache_path)
        except OSError as exc:
            logger.warning("Could not write server cache %s: %s", self.settings.cache_path, exc)
            self.cache = None
        return self.servers

    def server_tree(self) -> ServerTree:
        return group_servers(self.servers)

    async def setup(self, account: str, remember: bool = True) -> ProvisionResult:
        async def register(account_number: str, public_key: str) -> str:
            return await api.register_public_key(account_number, public_key, self.settings.register_url)

        async def fetch() -> List[Server]:
            return await self.load_servers(refresh=True)

        if not self.servers:
            cache = load_cache(self.settings.cache_path)
            if cache:
                self.cache = cache
                self.servers = cache.servers
        result = await provision(
            account,
            store=self.store,
            keys=self.keys,
            register=register,
            fetch_servers=fetch,
            servers=self.servers,
        )
        self.servers = result.servers
        if remember:
            self.accounts.save_account(account.strip())
        elif self.accounts.load_account() is not None:
            self.accounts.delete_account()
        return result

    def dependency_report(self) -> Dict[str, object]:
        platform = detect_platform()
        deps = check_dependencies()
        missing = {name: cmd for name, cmd in platform.dependency_commands.items() if not deps.get(name)}
        return {
            "platform": platform,
            "dependencies": deps,
            "missing": missing,
        }
