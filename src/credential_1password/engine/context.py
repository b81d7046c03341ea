"""Request context: everything one helper invocation owns.

A ``RequestContext`` is built once per process run and passed through
every command. It holds the mode, the parsed stdin, the session manager
and the vault resolver, so nothing is cached at module level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import IO

from credential_1password.config import DEFAULT_VAULT_NAME
from credential_1password.derive import STRATEGIES, ModeStrategy, derive_request
from credential_1password.engine.session import Clock, SessionManager, utc_now
from credential_1password.engine.vaults import VaultResolver
from credential_1password.errors import CredentialHelperError
from credential_1password.inputs import DEFAULT_STDIN_DEADLINE, ParsedInput, parse_input
from credential_1password.keystore.base import Keystore
from credential_1password.models import CredentialRequest
from credential_1password.modes import Mode
from credential_1password.op.runner import OpFunc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpTarget:
    """The session token and vault uuid an ``op`` call is scoped to."""

    session_token: str
    vault_uuid: str


class RequestContext:
    """Per-invocation state for the credential resolution engine."""

    def __init__(
        self,
        mode: Mode,
        op: OpFunc,
        keystore: Keystore,
        stdin: IO[str],
        stdin_deadline: float = DEFAULT_STDIN_DEADLINE,
        default_vault: str = DEFAULT_VAULT_NAME,
        clock: Clock = utc_now,
    ) -> None:
        self.mode = mode
        self.op = op
        self.keystore = keystore
        self.stdin = stdin
        self.stdin_deadline = stdin_deadline
        self.session = SessionManager(keystore, op, clock=clock)
        self.vaults = VaultResolver(
            keystore, self.session, op,
            default_name=default_vault,
            app_name=mode.app_name,
        )
        self._command = ""
        self._parsed: ParsedInput | None = None

    @property
    def strategy(self) -> ModeStrategy:
        return STRATEGIES[self.mode.kind]

    @property
    def command(self) -> str:
        return self._command

    @property
    def parsed(self) -> ParsedInput:
        if self._parsed is None:
            raise CredentialHelperError("no input has been read")
        return self._parsed

    def parse_input(self, command: str) -> ParsedInput:
        """Read stdin for *command*; later calls reuse the first result."""
        if self._parsed is None:
            self._command = command
            self._parsed = parse_input(self.mode, command, self.stdin, self.stdin_deadline)
        return self._parsed

    def request(self) -> CredentialRequest:
        """Derive the credential request; secrets are only derived for ``store``."""
        return derive_request(
            self.mode, self.parsed.fields, with_secret=self._command == "store",
        )

    def prepare(self) -> OpTarget:
        """Ensure a session token and a vault uuid are available."""
        token = self.session.get_token()
        vault_uuid = self.vaults.ensure()
        logger.debug("using vault %s for %s %s", vault_uuid, self.mode, self._command)
        return OpTarget(session_token=token, vault_uuid=vault_uuid)

