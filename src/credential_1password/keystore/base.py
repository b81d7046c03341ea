"""Keystore protocol and factory.

The keystore is the durable owner of the helper's cached state across
invocations: the session token and its issue date, the configured vault
name and the resolved vault uuid. Backends: KeyringKeystore (platform
secret store), FileKeystore (YAML file), MemoryKeystore (tests).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from credential_1password.errors import StoreError

if TYPE_CHECKING:
    from credential_1password.config import HelperConfig

SERVICE_NAME = "credential-1password"

SESSION_TOKEN_DATE_KEY = "session-token.date"
SESSION_TOKEN_VALUE_KEY = "session-token.value"
VAULT_NAME_KEY = "vault.name"
VAULT_UUID_KEY = "vault.uuid"


@runtime_checkable
class Keystore(Protocol):
    """Protocol for keystore backends.

    Any object with ``get()`` and ``set()`` methods satisfies this
    protocol.
    """

    def get(self, key: str) -> str:
        """Return the stored value, or ``""`` when *key* is absent.

        Raises:
            StoreError: If the backend cannot be read.
        """
        ...

    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*.

        Raises:
            StoreError: If the backend cannot be written.
        """
        ...


def build_keystore(config: HelperConfig) -> Keystore:
    """Build a keystore from the helper configuration.

    Supported ``keystore`` values: ``"keyring"`` (default), ``"file"``
    and ``"memory"``.
    """
    if config.keystore == "keyring":
        from credential_1password.keystore.keyring_store import KeyringKeystore

        return KeyringKeystore(service=SERVICE_NAME)

    if config.keystore == "file":
        from credential_1password.keystore.file_store import FileKeystore

        return FileKeystore(config.keystore_path)

    if config.keystore == "memory":
        from credential_1password.keystore.memory import MemoryKeystore

        return MemoryKeystore()

    raise StoreError(
        f"Unknown keystore type: {config.keystore}. "
        f"Available: 'keyring', 'file', 'memory'."
    )
