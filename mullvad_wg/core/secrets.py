"""Mullvad account number storage using python-keyring."""

from __future__ import annotations

from typing import Optional

import keyring
from keyring.errors import KeyringError, NoKeyringError

from ..utils.logging import get_logger

logger = get_logger("secrets")

SERVICE_NAME = "mullvad-wg"
ACCOUNT_KEY = "account"


class AccountStore:
    """Error tolerant keyring wrapper; a missing backend just means nothing is remembered."""

    def __init__(self, service: str = SERVICE_NAME) -> None:
        self._service = service
        self._available = True
        try:
            keyring.get_keyring()
        except Exception as exc:
            logger.warning("Keyring backend unavailable: %s", exc)
            self._available = False

    def save_account(self, account: str) -> bool:
        if not self._available:
            return False
        try:
            keyring.set_password(self._service, ACCOUNT_KEY, account)
            return True
        except (NoKeyringError, KeyringError) as exc:
            logger.error("Failed to save account number: %s", exc)
            return False

    def load_account(self) -> Optional[str]:
        if not self._available:
            return None
        try:
            return keyring.get_password(self._service, ACCOUNT_KEY) or None
        except (NoKeyringError, KeyringError) as exc:
            logger.error("Failed to read account number: %s", exc)
            return None

    def delete_account(self) -> bool:
        if not self._available:
            return False
        try:
            keyring.delete_password(self._service, ACCOUNT_KEY)
            return True
        except (NoKeyringError, KeyringError) as exc:
            logger.error("Failed to delete account number: %s", exc)
            return False
