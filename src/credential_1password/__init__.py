"""credential-1password: a git, docker and npm credential helper backed by 1Password."""

__version__ = "0.4.0"

from credential_1password.config import HelperConfig, find_config, load_config
from credential_1password.engine.context import RequestContext
from credential_1password.engine.retry import with_session_retry
from credential_1password.engine.session import SessionManager
from credential_1password.engine.vaults import VaultResolver
from credential_1password.errors import (
    AuthFailureError,
    CredentialHelperError,
    EmptyInputError,
    InvalidEncodingError,
    ItemNotFoundError,
    MissingFieldError,
    MultipleLinesError,
    StdinTimeoutError,
    StoreError,
    ToolError,
    UnknownModeError,
    VaultNotFoundError,
)
from credential_1password.keystore import FileKeystore, Keystore, MemoryKeystore, build_keystore
from credential_1password.models import CredentialRequest, SessionToken
from credential_1password.modes import Mode, ModeKind
from credential_1password.op.runner import OpRunner

__all__ = [
    "AuthFailureError",
    "CredentialHelperError",
    "CredentialRequest",
    "EmptyInputError",
    "FileKeystore",
    "HelperConfig",
    "InvalidEncodingError",
    "ItemNotFoundError",
    "Keystore",
    "MemoryKeystore",
    "MissingFieldError",
    "Mode",
    "ModeKind",
    "MultipleLinesError",
    "OpRunner",
    "RequestContext",
    "SessionManager",
    "SessionToken",
    "StdinTimeoutError",
    "StoreError",
    "ToolError",
    "UnknownModeError",
    "VaultNotFoundError",
    "VaultResolver",
    "build_keystore",
    "find_config",
    "load_config",
    "with_session_retry",
    "__version__",
]
