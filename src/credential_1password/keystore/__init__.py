"""Keystore backends for the helper's cached session and vault state."""

from credential_1password.keystore.base import (
    SERVICE_NAME,
    SESSION_TOKEN_DATE_KEY,
    SESSION_TOKEN_VALUE_KEY,
    VAULT_NAME_KEY,
    VAULT_UUID_KEY,
    Keystore,
    build_keystore,
)
from credential_1password.keystore.file_store import FileKeystore
from credential_1password.keystore.memory import MemoryKeystore

__all__ = [
    "FileKeystore",
    "Keystore",
    "MemoryKeystore",
    "SERVICE_NAME",
    "SESSION_TOKEN_DATE_KEY",
    "SESSION_TOKEN_VALUE_KEY",
    "VAULT_NAME_KEY",
    "VAULT_UUID_KEY",
    "build_keystore",
]
