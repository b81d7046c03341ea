"""Vault resolver: maps a vault name to its 1Password uuid.

The uuid is resolved at most once per invocation and cached in the
keystore (``vault.uuid``) across invocations. Renaming the vault always
clears the cached uuid before resolving the new name.
"""

from __future__ import annotations

import logging

from credential_1password.config import DEFAULT_VAULT_NAME
from credential_1password.engine.session import SessionManager
from credential_1password.errors import VaultNotFoundError
from credential_1password.keystore.base import VAULT_NAME_KEY, VAULT_UUID_KEY, Keystore
from credential_1password.modes import APP_SUFFIX
from credential_1password.op import client
from credential_1password.op.runner import OpFunc

logger = logging.getLogger(__name__)

VAULT_DESCRIPTION = "Contains credentials managed by {app}."


class VaultResolver:
    """Resolves, and on request creates, the vault secrets are kept in."""

    def __init__(
        self,
        keystore: Keystore,
        session: SessionManager,
        op: OpFunc,
        default_name: str = DEFAULT_VAULT_NAME,
        app_name: str = APP_SUFFIX,
    ) -> None:
        self._keystore = keystore
        self._session = session
        self._op = op
        self._default_name = default_name
        self._app_name = app_name
        self._name = ""
        self._uuid = ""

    @property
    def default_name(self) -> str:
        return self._default_name

    @property
    def cached_uuid(self) -> str:
        return self._uuid

    def get_vault_name(self) -> str:
        """Return the configured vault name, persisting the default on first use."""
        if self._name:
            return self._name
        name = self._keystore.get(VAULT_NAME_KEY)
        if not name:
            name = self._default_name
            self._keystore.set(VAULT_NAME_KEY, name)
        self._name = name
        return name

    def resolve_vault_id(self, name: str, allow_create: bool = False) -> str:
        """Return the uuid of the vault called *name*.

        Checks memory, then the keystore cache, then asks ``op``. A
        missing vault is created only when *allow_create* is set.

        Raises:
            VaultNotFoundError: If the vault does not exist and
                *allow_create* is false.
        """
        if self._uuid:
            return self._uuid

        cached = self._keystore.get(VAULT_UUID_KEY)
        if cached:
            self._uuid = cached
            return cached

        token = self._session.get_token()
        vault = client.get_vault(self._op, session_token=token, name=name)
        if vault is not None:
            logger.debug("resolved vault %s to %s", name, vault.uuid)
            return self._cache_uuid(vault.uuid)

        if not allow_create:
            raise VaultNotFoundError(name, self._app_name)

        created = client.create_vault(
            self._op,
            session_token=token,
            name=name,
            description=VAULT_DESCRIPTION.format(app=self._app_name),
        )
        logger.info("created vault %s (%s)", name, created.uuid)
        return self._cache_uuid(created.uuid)

    def ensure(self) -> str:
        """Resolve the configured vault, creating it only if it is the default one."""
        name = self.get_vault_name()
        return self.resolve_vault_id(name, allow_create=name == self._default_name)

    def set_vault_name(self, name: str, allow_create: bool = False) -> str:
        """Switch to the vault called *name* and return its uuid.

        The previously cached uuid is cleared first. The new name is only
        persisted once its uuid has been resolved.
        """
        self._uuid = ""
        self._keystore.set(VAULT_UUID_KEY, "")

        uuid = self.resolve_vault_id(name, allow_create=allow_create)
        self._name = name
        self._keystore.set(VAULT_NAME_KEY, name)
        return uuid

    def _cache_uuid(self, uuid: str) -> str:
        self._uuid = uuid
        self._keystore.set(VAULT_UUID_KEY, uuid)
        return uuid
