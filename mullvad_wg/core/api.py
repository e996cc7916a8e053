"""Mullvad HTTP API: relay directory and WireGuard key registration."""

from __future__ import annotations

import asyncio
import string
from typing import Any, Dict, List, Optional

import aiohttp

from ..utils.logging import get_logger
from .errors import DirectoryError, RegistrationError
from .server import Server, code_from_hostname
from .settings import DEFAULT_PORT, REGISTER_KEY_URL, RELAY_LIST_URL

logger = get_logger("api")

REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=30)
ADDRESS_CHARSET = frozenset(string.hexdigits + ":/.,")


def parse_relay_list(payload: Dict[str, Any], port: int = DEFAULT_PORT) -> List[Server]:
    """Flatten ``countries -> cities -> relays`` into servers."""
    servers: List[Server] = []
    try:
        for country in payload["countries"]:
            for city in country["cities"]:
                for relay in city["relays"]:
                    hostname = relay["hostname"]
                    servers.append(
                        Server(
                            code=code_from_hostname(hostname),
                            hostname=hostname,
                            public_key=relay["public_key"],
                            ipv4_addr=relay["ipv4_addr_in"],
                            port=port,
                            country=country["name"],
                            city=city["name"],
                        )
                    )
    except (KeyError, TypeError) as exc:
        raise DirectoryError(f"Unexpected relay list format: missing {exc}") from exc
    return servers


def parse_registration_response(text: str) -> str:
    """Return the assigned addresses, e.g. ``10.66.1.2/32,fc00:bbbb:bbbb:bb01::1:102/128``.

    Anything outside the address alphabet is the server explaining a failure.
    """
    body = text.strip()
    if body and all(ch in ADDRESS_CHARSET for ch in body):
        return body
    raise RegistrationError(body or "empty response")


async def fetch_servers(
    url: str = RELAY_LIST_URL,
    port: int = DEFAULT_PORT,
    session: Optional[aiohttp.ClientSession] = None,
) -> List[Server]:
    try:
        if session is None:
            async with aiohttp.ClientSession(timeout=REQUEST_TIMEOUT) as owned:
                payload = await _get_json(owned, url)
        else:
            payload = await _get_json(session, url)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
        raise DirectoryError(f"Failed to fetch servers: {str(exc) or 'request timed out'}") from exc
    servers = parse_relay_list(payload, port)
    logger.info("Fetched %d relays", len(servers))
    return servers


async def register_public_key(
    account: str,
    public_key: str,
    url: str = REGISTER_KEY_URL,
    session: Optional[aiohttp.ClientSession] = None,
) -> str:
    form = {"account": account, "pubkey": public_key}
    try:
        if session is None:
            async with aiohttp.ClientSession(timeout=REQUEST_TIMEOUT) as owned:
                text = await _post_form(owned, url, form)
        else:
            text = await _post_form(session, url, form)
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise RegistrationError(str(exc) or "request timed out") from exc
    address = parse_registration_response(text)
    logger.info("Registered public key, assigned %s", address)
    return address


async def _get_json(session: aiohttp.ClientSession, url: str) -> Dict[str, Any]:
    async with session.get(url) as resp:
        resp.raise_for_status()
        return await resp.json(content_type=None)


async def _post_form(session: aiohttp.ClientSession, url: str, form: Dict[str, str]) -> str:
    async with session.post(url, data=form) as resp:
        return await resp.text()
