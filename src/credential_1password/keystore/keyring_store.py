"""Platform secret store backend.

Uses the ``keyring`` library, which picks the macOS Keychain, the
freedesktop Secret Service or Windows Credential Locker. Each keystore
key is one password entry under the helper's service name.
"""

from __future__ import annotations

import logging

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from credential_1password.errors import StoreError

logger = logging.getLogger(__name__)


class KeyringKeystore:
    """Keystore backed by the operating system's secret store."""

    def __init__(self, service: str) -> None:
        self._service = service

    def get(self, key: str) -> str:
        try:
            value = keyring.get_password(self._service, key)
        except KeyringError as exc:
            raise StoreError(f"unable to read {key!r} from keyring: {exc}") from exc
        return value or ""

    def set(self, key: str, value: str) -> None:
        try:
            if value:
                keyring.set_password(self._service, key, value)
            else:
                self._delete(key)
        except KeyringError as exc:
            raise StoreError(f"unable to write {key!r} to keyring: {exc}") from exc

    def _delete(self, key: str) -> None:
        # Blank values are stored as absent entries.
        try:
            keyring.delete_password(self._service, key)
        except PasswordDeleteError:
            logger.debug("keyring entry %s already absent", key)
