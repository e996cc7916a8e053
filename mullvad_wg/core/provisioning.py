"""First-run setup: key material, registration and profile generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence

from ..utils.logging import get_logger
from .errors import SetupError
from .keys import KeyTool
from .profile_store import ProfileStore
from .server import Server

logger = get_logger("provisioning")

Registrar = Callable[[str, str], Awaitable[str]]
ServerFetcher = Callable[[], Awaitable[List[Server]]]


@dataclass
class ProvisionResult:
    count: int
    address: str
    reused_key: bool
    servers: List[Server]


async def provision(
    account: str,
    *,
    store: ProfileStore,
    keys: KeyTool,
    register: Registrar,
    fetch_servers: ServerFetcher,
    servers: Optional[Sequence[Server]] = None,
) -> ProvisionResult:
    """Register this host with ``account`` and write a profile per relay.

    An existing private key is reused so that re-running setup does not
    register another device with the account.
    """
    account = account.strip()
    if not account:
        raise SetupError("Account number cannot be empty")

    private_key = store.find_any_existing_private_key()
    reused = private_key is not None
    if private_key is None:
        logger.info("Generating new private key")
        private_key = keys.generate_private_key()
    else:
        logger.info("Using existing private key")
    public_key = keys.derive_public_key(private_key)

    address = await register(account, public_key)

    server_list = list(servers) if servers else await fetch_servers()
    count = store.write_all_profiles(server_list, private_key, address)
    logger.info("Setup complete, generated %d profiles", count)
    return ProvisionResult(count=count, address=address, reused_key=reused, servers=server_list)
