"""Credential resolution engine: session, vault and retry handling."""

from credential_1password.engine.context import OpTarget, RequestContext
from credential_1password.engine.retry import with_session_retry
from credential_1password.engine.session import SessionManager
from credential_1password.engine.vaults import VaultResolver

__all__ = [
    "OpTarget",
    "RequestContext",
    "SessionManager",
    "VaultResolver",
    "with_session_retry",
]
